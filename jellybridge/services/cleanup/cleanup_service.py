"""
Service de nettoyage de la bibliotheque placeholder.

CleanupService enchaine des passes independantes et idempotentes :
- retention : suppression des dossiers plus vieux que max_retention_days
- orphelins : suppression des dossiers ayant un NFO mais pas de metadata.json
- networks invalides : purge optionnelle des items ignores depuis longtemps
- placeholders manquants : recreation des videos absentes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger

from jellybridge.core.entities import MovieItem
from jellybridge.services.discover import placeholder_kind_for
from jellybridge.services.metadata_store import (
    METADATA_FILENAME,
    FolderMetadataStore,
    StoredItem,
)
from jellybridge.services.placeholder_generator import PlaceholderVideoGenerator

from .dataclasses import CleanupResult
from .executors import delete_folder


class CleanupService:
    """
    Nettoyage de la bibliotheque placeholder.

    Les items dont le network n'est pas configure ne sont jamais supprimes
    par la passe de retention ; seule la politique de purge optionnelle
    (purge_invalid_network_after_days) peut les supprimer.
    """

    def __init__(
        self,
        store: FolderMetadataStore,
        generator: PlaceholderVideoGenerator,
        retention_days: int,
        configured_network_ids: set[int],
        purge_invalid_network_after_days: Optional[int] = None,
    ) -> None:
        """
        Initialise le service de cleanup.

        Args:
            store: Stockage des dossiers placeholder
            generator: Generateur des videos placeholder
            retention_days: Age maximal d'un dossier en jours
            configured_network_ids: Networks actuellement configures
            purge_invalid_network_after_days: Age de purge des items au network
                invalide (None = jamais)
        """
        self._store = store
        self._generator = generator
        self._retention_days = retention_days
        self._network_ids = set(configured_network_ids)
        self._purge_after_days = purge_invalid_network_after_days

    def _has_valid_network(self, stored: StoredItem) -> bool:
        return stored.item.network_id is not None and stored.item.network_id in self._network_ids

    def delete_expired_items(
        self,
        stored_items: list[StoredItem],
        result: CleanupResult,
        now: Optional[datetime] = None,
    ) -> list[StoredItem]:
        """
        Supprime les dossiers dont la date de creation depasse la retention.

        Un item sans date de creation est considere comme expire.

        Returns:
            Items conserves
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self._retention_days)
        kept: list[StoredItem] = []

        for stored in stored_items:
            if not self._has_valid_network(stored):
                kept.append(stored)
                continue
            result.items_processed += 1
            created = stored.item.created_date
            if created is not None and created >= cutoff:
                kept.append(stored)
                continue

            if delete_folder(stored.directory, result):
                logger.info(f"Retention depassee, dossier supprime : {stored.directory.name}")
                if isinstance(stored.item, MovieItem):
                    result.movies_deleted += 1
                else:
                    result.shows_deleted += 1
            else:
                kept.append(stored)
        return kept

    def delete_orphan_folders(self, result: CleanupResult) -> None:
        """Supprime les dossiers ayant un NFO mais pas de metadata.json."""
        for directory, item_class in self._store.find_descriptor_directories():
            if (directory / METADATA_FILENAME).exists():
                result.orphans_processed += 1
                continue
            if delete_folder(directory, result):
                logger.info(f"Dossier orphelin supprime : {directory}")
                if item_class is MovieItem:
                    result.orphan_movies_deleted += 1
                else:
                    result.orphan_shows_deleted += 1

    def purge_invalid_network_items(
        self,
        stored_items: list[StoredItem],
        result: CleanupResult,
        now: Optional[datetime] = None,
    ) -> list[StoredItem]:
        """
        Purge les items ignores dont le network n'est plus configure.

        Sans politique configuree, rien n'est supprime.

        Returns:
            Items conserves
        """
        if self._purge_after_days is None:
            return stored_items

        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self._purge_after_days)
        kept: list[StoredItem] = []
        for stored in stored_items:
            created = stored.item.created_date
            expired = created is None or created < cutoff
            if self._has_valid_network(stored) or not stored.ignored or not expired:
                kept.append(stored)
                continue
            if delete_folder(stored.directory, result):
                logger.info(f"Item au network invalide purge : {stored.directory.name}")
                result.invalid_network_purged += 1
            else:
                kept.append(stored)
        return kept

    async def create_missing_placeholders(
        self,
        stored_items: list[StoredItem],
        result: CleanupResult,
    ) -> None:
        """Recree la video des dossiers non ignores qui n'en ont pas."""
        for stored in stored_items:
            if stored.ignored:
                continue
            kind = placeholder_kind_for(stored.item)
            if self._generator.has_placeholder(stored.directory, kind):
                continue
            if await self._generator.generate(kind, stored.directory):
                result.placeholders_created += 1
            else:
                result.errors.append(f"Placeholder non cree : {stored.directory}")

    async def cleanup(self, now: Optional[datetime] = None) -> CleanupResult:
        """
        Execute toutes les passes de nettoyage.

        Raises:
            LibraryDirectoryError: Si la bibliotheque est absente
        """
        result = CleanupResult()
        self._store.ensure_library_directory()

        stored_items = self._store.read_items()
        remaining = self.delete_expired_items(stored_items, result, now)
        self.delete_orphan_folders(result)
        remaining = self.purge_invalid_network_items(remaining, result, now)
        await self.create_missing_placeholders(remaining, result)

        result.message = (
            f"Nettoyage : {result.items_deleted} dossier(s) supprime(s) "
            f"({result.movies_cleaned} film(s), {result.shows_cleaned} serie(s)), "
            f"{result.placeholders_created} placeholder(s) recree(s)"
        )
        if result.errors:
            result.message += f", {len(result.errors)} erreur(s)"
        logger.info(result.message)
        return result
