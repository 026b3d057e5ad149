"""
Images fixes embarquées servant de source aux vidéos placeholder.
"""
