"""
Adaptateur de la bibliothèque réelle (serveur Jellyfin).
"""

from .jellyfin_client import JellyfinLibraryClient

__all__ = ["JellyfinLibraryClient"]
