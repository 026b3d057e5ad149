"""
Entités du domaine : items du catalogue, items de bibliothèque, networks.
"""

from .catalog import (
    CatalogItem,
    MediaKind,
    MovieItem,
    ShowItem,
    catalog_item_from_dict,
)
from .library import LibraryItem, LibraryUser
from .network import Network

__all__ = [
    "CatalogItem",
    "LibraryItem",
    "LibraryUser",
    "MediaKind",
    "MovieItem",
    "Network",
    "ShowItem",
    "catalog_item_from_dict",
]
