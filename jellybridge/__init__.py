"""
JellyBridge - Pont entre le catalogue Jellyseerr et une bibliothèque Jellyfin.

Ce package récupère le catalogue "discover" de Jellyseerr, le représente
sous forme de dossiers placeholder dans une bibliothèque dédiée, les
réconcilie avec la vraie bibliothèque et nettoie les dossiers expirés.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, erreurs)
- services/ : Couche application (synchronisation, nettoyage, tri)
- adapters/ : Couche infrastructure (CLI, clients API Jellyseerr et Jellyfin)
"""

__version__ = "0.1.0"
