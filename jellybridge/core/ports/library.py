"""
Port d'accès à la vraie bibliothèque (serveur Jellyfin).

Le moteur de correspondance et le service de tri n'interagissent avec
le serveur de bibliothèque qu'à travers cette interface.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from jellybridge.core.entities import LibraryItem, LibraryUser, MediaKind


class ILibraryGateway(ABC):
    """Interface de la bibliothèque réelle."""

    @abstractmethod
    async def get_items(self, kind: MediaKind) -> list[LibraryItem]:
        """
        Énumère les items d'un type avec leur chemin et leurs identifiants externes.

        Raises:
            IncompatibleLibraryError: Si la réponse du serveur est inattendue
        """
        ...

    @abstractmethod
    async def find_item_by_directory(self, directory: Path) -> Optional[LibraryItem]:
        """Retrouve l'item dont le dossier correspond au chemin donne."""
        ...

    @abstractmethod
    async def get_users(self) -> list[LibraryUser]:
        """Liste les utilisateurs du serveur."""
        ...

    @abstractmethod
    async def update_play_count(
        self,
        user: LibraryUser,
        item: LibraryItem,
        play_count: int,
        played: bool,
    ) -> bool:
        """
        Met à jour le nombre de lectures d'un item pour un utilisateur.

        Returns:
            True si la mise à jour a été acceptée
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Libère les ressources HTTP."""
        ...
