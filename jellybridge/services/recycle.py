"""
Vidage complet de la bibliothèque placeholder.
"""

import shutil
from dataclasses import dataclass

from loguru import logger

from jellybridge.services.metadata_store import FolderMetadataStore
from jellybridge.services.results import RunSummary


@dataclass
class RecycleResult(RunSummary):
    """Résultat d'un vidage."""

    files_deleted: int = 0
    directories_deleted: int = 0


class RecycleService:
    """Supprime tout le contenu de la bibliothèque, marqueurs .ignore compris."""

    def __init__(self, store: FolderMetadataStore) -> None:
        self._store = store

    async def recycle_library(self) -> RecycleResult:
        """
        Vide la bibliothèque placeholder (la racine est conservée).

        Raises:
            LibraryDirectoryError: Si la bibliothèque est absente
            OSError: Si une suppression échoue
        """
        result = RecycleResult()
        self._store.ensure_library_directory()

        for entry in sorted(self._store.library_directory.iterdir()):
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
                result.directories_deleted += 1
            else:
                entry.unlink()
                result.files_deleted += 1

        result.message = (
            f"Bibliothèque vidée : {result.directories_deleted} dossier(s), "
            f"{result.files_deleted} fichier(s) supprimé(s)"
        )
        logger.info(result.message)
        return result
