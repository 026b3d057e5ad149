"""
Ports (interfaces abstraites) du domaine JellyBridge.

Les adaptateurs fournissent les implémentations concrètes :
- ICatalogClient : catalogue distant (Jellyseerr)
- ILibraryGateway : vraie bibliothèque (Jellyfin)
"""

from .catalog import ICatalogClient
from .library import ILibraryGateway

__all__ = ["ICatalogClient", "ILibraryGateway"]
