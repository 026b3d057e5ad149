"""
Package de nettoyage de la bibliotheque placeholder.

Reexporte CleanupService et ses dataclasses.
"""

from .cleanup_service import CleanupService
from .dataclasses import CleanupResult

__all__ = [
    "CleanupService",
    "CleanupResult",
]
