"""
Adaptateur CLI (typer + rich).
"""
