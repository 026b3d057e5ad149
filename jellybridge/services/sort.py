"""
Tri de la bibliothèque placeholder par nombre de lectures.

Jellyfin permet de trier par nombre de lectures : attribuer des compteurs
aux items placeholder fixe leur ordre d'affichage pour chaque utilisateur.
- NONE / SMART : compteurs remis à 0
- RANDOM : compteurs 1000, 1100, 1200... distribués aléatoirement
"""

import random
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from jellybridge.config import SortOrder
from jellybridge.core.ports.library import ILibraryGateway
from jellybridge.services.metadata_store import FolderMetadataStore
from jellybridge.services.results import RunSummary

RANDOM_BASE_PLAY_COUNT = 1000
RANDOM_PLAY_COUNT_STEP = 100


@dataclass
class SortResult(RunSummary):
    """Résultat d'un tri."""

    successes: int = 0
    failures: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class SortService:
    """Applique l'algorithme de tri configuré à tous les utilisateurs."""

    def __init__(
        self,
        store: FolderMetadataStore,
        library: ILibraryGateway,
        sort_order: SortOrder = SortOrder.NONE,
        mark_media_played: bool = False,
        shuffle: Callable[[list], None] = random.shuffle,
    ) -> None:
        self._store = store
        self._library = library
        self._sort_order = sort_order
        self._mark_media_played = mark_media_played
        self._shuffle = shuffle

    def compute_play_counts(self, directories: list[Path]) -> dict[Path, int]:
        """Calcule le nombre de lectures à attribuer à chaque dossier."""
        if self._sort_order != SortOrder.RANDOM:
            if self._sort_order == SortOrder.SMART:
                logger.debug("Tri SMART non disponible, compteurs remis à zéro")
            return {directory: 0 for directory in directories}

        play_counts = [
            RANDOM_BASE_PLAY_COUNT + index * RANDOM_PLAY_COUNT_STEP
            for index in range(len(directories))
        ]
        self._shuffle(play_counts)
        return dict(zip(directories, play_counts))

    async def sort_library(self) -> SortResult:
        """
        Met à jour les compteurs de lecture des dossiers non ignorés.

        Raises:
            LibraryDirectoryError: Si la bibliothèque est absente
        """
        result = SortResult()
        self._store.ensure_library_directory()

        directories: list[Path] = []
        for stored in self._store.read_items():
            if stored.ignored:
                result.skipped.append(str(stored.directory))
            else:
                directories.append(stored.directory)

        users = await self._library.get_users()
        if not directories or not users:
            result.message = "Aucun item ou utilisateur à trier"
            logger.info(result.message)
            return result

        play_counts = self.compute_play_counts(directories)
        for directory, play_count in sorted(play_counts.items(), key=lambda entry: entry[1]):
            item = await self._library.find_item_by_directory(directory)
            if item is None:
                result.skipped.append(str(directory))
                continue

            updated = True
            for user in users:
                if not await self._library.update_play_count(
                    user, item, play_count, self._mark_media_played
                ):
                    updated = False
            if updated:
                result.successes += 1
            else:
                result.failures.append(str(directory))

        result.message = (
            f"Tri {self._sort_order.value} : {result.successes} item(s) mis à jour, "
            f"{len(result.failures)} échec(s), {len(result.skipped)} ignoré(s)"
        )
        logger.info(result.message)
        return result
