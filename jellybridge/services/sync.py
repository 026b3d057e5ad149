"""
Synchronisation complète Jellyseerr -> bibliothèque placeholder.

Étapes d'une exécution (verrou d'opération déjà tenu) :
1. Vérification de la disponibilité de Jellyseerr
2. Récupération des films et séries par network
3. Dédoublonnage
4. Écriture des dossiers (metadata.json + NFO)
5. Correspondance avec la vraie bibliothèque et marqueurs .ignore
6. Vidéos placeholder des items non trouvés
7. Marquage des items dont le network n'est plus configuré
8. Nettoyage (retention, orphelins)
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from jellybridge.core.entities import MovieItem
from jellybridge.core.errors import UpstreamHttpError, UpstreamTimeoutError
from jellybridge.core.ports.catalog import ICatalogClient
from jellybridge.services.cleanup import CleanupResult, CleanupService
from jellybridge.services.discover import DiscoverService
from jellybridge.services.matching import LibraryMatcher
from jellybridge.services.metadata_store import FolderMetadataStore
from jellybridge.services.results import ErrorKind, RunSummary


@dataclass
class SyncResult(RunSummary):
    """Résultat d'une synchronisation."""

    movies_fetched: int = 0
    shows_fetched: int = 0
    unique_items: int = 0
    added: int = 0
    updated: int = 0
    matched: int = 0
    ignore_files_created: int = 0
    invalid_network_ignored: int = 0
    placeholders_created: int = 0
    cleanup: Optional[CleanupResult] = None


class SyncService:
    """
    Orchestre une synchronisation complète.

    Example:
        result = await sync_service.sync()
        if not result.success:
            print(result.message)
    """

    def __init__(
        self,
        catalog: ICatalogClient,
        store: FolderMetadataStore,
        discover: DiscoverService,
        matcher: LibraryMatcher,
        cleanup: CleanupService,
        exclude_from_main_libraries: bool = True,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._discover = discover
        self._matcher = matcher
        self._cleanup = cleanup
        self._exclude_from_main_libraries = exclude_from_main_libraries

    async def sync(self) -> SyncResult:
        """
        Exécute la synchronisation.

        Les échecs globaux (Jellyseerr injoignable, aucun item récupéré)
        retournent un résultat en échec sans aucune écriture disque.

        Raises:
            LibraryDirectoryError: Si la bibliothèque placeholder est absente
            OSError: Si la bibliothèque n'est pas inscriptible
        """
        result = SyncResult()
        self._store.ensure_library_directory()

        # Étape 1 : disponibilité du service
        try:
            await self._catalog.get_status()
        except UpstreamTimeoutError as e:
            return result.fail(f"Jellyseerr injoignable : {e}", ErrorKind.CONNECTIVITY)
        except UpstreamHttpError as e:
            return result.fail(f"Jellyseerr en erreur ({e.code.value}) : {e}", ErrorKind.HTTP)

        # Étape 2 : récupération
        items = await self._discover.fetch_discover_items()
        result.movies_fetched = sum(1 for item in items if isinstance(item, MovieItem))
        result.shows_fetched = len(items) - result.movies_fetched
        if not items:
            return result.fail(
                "Aucun item récupéré : Jellyseerr répond mais aucun network configuré "
                "n'a renvoyé de contenu (vérifier la région et les networks)",
                ErrorKind.CONNECTIVITY,
            )

        # Étape 3 : dédoublonnage
        unique_items = self._discover.filter_duplicates(items)
        result.unique_items = len(unique_items)

        # Étape 4 : dossiers
        added, updated = self._store.write_items(unique_items)
        result.added = len(added)
        result.updated = len(updated)
        stored_items = self._store.read_items()

        # Étape 5 : correspondance
        if self._exclude_from_main_libraries:
            matches = await self._matcher.find_matches(stored_items)
            result.matched = len(matches.matched)
            result.ignore_files_created = await self._discover.write_ignore_files(matches.matched)
            unmatched = matches.unmatched
        else:
            self._store.delete_ignore_files()
            unmatched = stored_items

        # Étape 6 : placeholders
        result.placeholders_created = await self._discover.create_placeholders(
            [stored for stored in unmatched if not stored.ignored]
        )

        # Étape 7 : networks invalides
        result.invalid_network_ignored = len(
            self._discover.ignore_invalid_network_items(stored_items)
        )

        # Étape 8 : nettoyage
        result.cleanup = await self._cleanup.cleanup()
        result.errors.extend(result.cleanup.errors)

        result.message = (
            f"Synchronisation terminée : {result.movies_fetched} film(s) et "
            f"{result.shows_fetched} série(s) récupérés, {result.added} ajouté(s), "
            f"{result.updated} mis à jour, {result.matched} déjà en bibliothèque, "
            f"{result.placeholders_created} placeholder(s) créé(s)"
        )
        logger.info(result.message)
        return result
