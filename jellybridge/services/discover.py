"""
Moteur de découverte : récupération, dédoublonnage et préparation des dossiers.

Regroupe les étapes de la synchronisation qui opèrent sur les items du
catalogue : récupération par network, dédoublonnage, marqueurs .ignore
(correspondances et networks invalides) et création concurrente des
vidéos placeholder.
"""

import asyncio
import os

from loguru import logger

from jellybridge.core.entities import CatalogItem, MediaKind, MovieItem, Network
from jellybridge.core.errors import UpstreamHttpError
from jellybridge.core.ports.catalog import ICatalogClient
from jellybridge.services.matching import LibraryMatch
from jellybridge.services.metadata_store import FolderMetadataStore, StoredItem
from jellybridge.services.placeholder_generator import (
    PlaceholderKind,
    PlaceholderVideoGenerator,
)
from jellybridge.utils.keyed_lock import KeyedLock


def placeholder_kind_for(item: CatalogItem) -> PlaceholderKind:
    """Les films reçoivent une vidéo, les séries une saison 00 factice."""
    return PlaceholderKind.MOVIE if isinstance(item, MovieItem) else PlaceholderKind.SEASON


class DiscoverService:
    """
    Opérations de découverte sur les items du catalogue.

    Toutes les méthodes supposent que le verrou d'opération est déjà tenu.
    """

    def __init__(
        self,
        catalog: ICatalogClient,
        store: FolderMetadataStore,
        generator: PlaceholderVideoGenerator,
        networks: list[Network],
        network_folders: bool = False,
        add_duplicate_content: bool = False,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._generator = generator
        self._networks = list(networks)
        self._network_folders = network_folders
        self._add_duplicate_content = add_duplicate_content
        self._path_locks = KeyedLock()

    @property
    def configured_network_ids(self) -> set[int]:
        return {network.id for network in self._networks}

    async def fetch_discover_items(self) -> list[CatalogItem]:
        """
        Récupère films puis séries pour chaque network, séquentiellement.

        Un network en erreur HTTP est journalisé et ignoré ; une erreur
        de transport interrompt la récupération.
        """
        items: list[CatalogItem] = []
        for kind in (MediaKind.MOVIE, MediaKind.SHOW):
            for network in self._networks:
                try:
                    fetched = await self._catalog.discover(kind, network)
                except UpstreamHttpError as e:
                    logger.warning(f"Découverte {kind.value} ignorée pour {network.name} : {e}")
                    continue
                logger.info(f"{network.name} : {len(fetched)} item(s) {kind.value}")
                items.extend(fetched)
        return items

    def filter_duplicates(self, items: list[CatalogItem]) -> list[CatalogItem]:
        """
        Élimine les doublons en conservant la première occurrence.

        En mode dossiers par network avec doublons autorisés, un même titre
        peut exister sous plusieurs networks : le dédoublonnage se fait alors
        par dossier cible. Sinon, par identité (id, type).
        """
        library_aware = self._network_folders and self._add_duplicate_content
        seen: set = set()
        unique: list[CatalogItem] = []
        for item in items:
            key = self._store.item_directory(item) if library_aware else item.identity_key()
            if key in seen:
                logger.debug(f"Doublon ignore : {item.name} ({item.id}, {item.network_tag})")
                continue
            seen.add(key)
            unique.append(item)
        logger.info(f"Dédoublonnage : {len(items)} -> {len(unique)} item(s)")
        return unique

    async def write_ignore_files(self, matches: list[LibraryMatch]) -> int:
        """
        Crée un .ignore pour chaque placeholder déjà présent dans la bibliothèque.

        Le marqueur contient l'item réel sérialisé. Les marqueurs existants
        ne sont pas modifiés.

        Returns:
            Nombre de marqueurs créés
        """
        loop = asyncio.get_running_loop()
        tasks = [
            loop.run_in_executor(
                None,
                self._store.write_ignore,
                match.placeholder.directory,
                match.library_item.to_dict(),
            )
            for match in matches
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return _count_successes(
            results, [match.placeholder for match in matches], "Marqueur .ignore"
        )

    def ignore_invalid_network_items(self, stored_items: list[StoredItem]) -> list[StoredItem]:
        """
        Marque .ignore les items dont le network n'est plus configuré.

        Les dossiers ne sont pas supprimés ; ils sortent seulement du
        traitement actif.

        Returns:
            Items nouvellement marqués
        """
        configured = self.configured_network_ids
        newly_ignored = []
        for stored in stored_items:
            network_id = stored.item.network_id
            if network_id is not None and network_id in configured:
                continue
            if self._store.write_ignore(
                stored.directory,
                {"reason": "invalid_network", "networkId": network_id},
            ):
                logger.info(f"Network {network_id} non configuré, item ignoré : {stored.directory.name}")
                newly_ignored.append(stored)
        return newly_ignored

    async def create_placeholders(self, stored_items: list[StoredItem]) -> int:
        """
        Crée les vidéos placeholder manquantes, en parallèle.

        Un échec sur un item n'interrompt pas les autres. Deux items
        pointant vers le même dossier ne sont traités qu'une fois.

        Returns:
            Nombre de vidéos créées
        """
        results = await asyncio.gather(
            *(self._create_placeholder(stored) for stored in stored_items),
            return_exceptions=True,
        )
        created = _count_successes(results, stored_items, "Placeholder")
        logger.info(f"Placeholders : {created} créé(s) sur {len(stored_items)} item(s)")
        return created

    async def _create_placeholder(self, stored: StoredItem) -> bool:
        kind = placeholder_kind_for(stored.item)
        key = os.path.normcase(str(stored.directory.resolve()))
        async with self._path_locks.acquire(key):
            if stored.ignored or self._generator.has_placeholder(stored.directory, kind):
                return False
            return await self._generator.generate(kind, stored.directory)


def _count_successes(
    results: list,
    stored_items: list[StoredItem],
    label: str,
) -> int:
    """Compte les résultats vrais et journalise les exceptions par item."""
    count = 0
    for stored, result in zip(stored_items, results):
        if isinstance(result, BaseException):
            logger.error(f"{label} en échec pour {stored.directory.name} : {result}")
        elif result:
            count += 1
    return count
