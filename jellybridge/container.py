"""
Container d'injection de dépendances via dependency-injector.

Fournit une gestion centralisée des dépendances pour la CLI.
Le verrou d'opération est un singleton partagé par toutes les commandes.
"""

from dependency_injector import containers, providers

from .adapters.api.jellyseerr_client import JellyseerrClient
from .adapters.library.jellyfin_client import JellyfinLibraryClient
from .config import Settings
from .services.cleanup import CleanupService
from .services.discover import DiscoverService
from .services.matching import LibraryMatcher
from .services.metadata_store import FolderMetadataStore
from .services.operation_lock import OperationLock, OperationRunner
from .services.placeholder_generator import PlaceholderVideoGenerator
from .services.recycle import RecycleService
from .services.sort import SortService
from .services.sync import SyncService


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        runner = container.operation_runner()
        result = await runner.run("sync", container.sync_service().sync)
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Verrou global des opérations mutantes
    operation_lock = providers.Singleton(OperationLock)
    operation_runner = providers.Factory(
        OperationRunner,
        lock=operation_lock,
        default_timeout=config.provided.task_timeout_seconds,
    )

    # Clients API - Singleton avec paramètres depuis config
    catalog_client = providers.Singleton(
        JellyseerrClient,
        base_url=config.provided.jellyseerr_url,
        api_key=config.provided.api_key,
        request_timeout=config.provided.request_timeout,
        retry_attempts=config.provided.retry_attempts,
        max_discover_pages=config.provided.max_discover_pages,
        region=config.provided.region,
    )
    library_client = providers.Singleton(
        JellyfinLibraryClient,
        base_url=config.provided.jellyfin_url,
        api_key=config.provided.jellyfin_api_key,
        request_timeout=config.provided.request_timeout,
        retry_attempts=config.provided.retry_attempts,
    )

    # Stockage disque et générateur de placeholders
    metadata_store = providers.Singleton(
        FolderMetadataStore,
        library_directory=config.provided.library_directory,
        network_folders=config.provided.network_folders_enabled,
        library_prefix=config.provided.library_prefix,
    )
    placeholder_generator = providers.Singleton(
        PlaceholderVideoGenerator,
        cache_directory=config.provided.cache_directory,
        duration_seconds=config.provided.placeholder_duration_seconds,
        ffmpeg_path=config.provided.ffmpeg_path,
    )

    # Services - Factory car dépendent des paramètres de configuration
    discover_service = providers.Factory(
        DiscoverService,
        catalog=catalog_client,
        store=metadata_store,
        generator=placeholder_generator,
        networks=config.provided.networks,
        network_folders=config.provided.network_folders_enabled,
        add_duplicate_content=config.provided.add_duplicate_content,
    )
    library_matcher = providers.Factory(
        LibraryMatcher,
        library=library_client,
        library_directory=config.provided.library_directory,
    )
    cleanup_service = providers.Factory(
        CleanupService,
        store=metadata_store,
        generator=placeholder_generator,
        retention_days=config.provided.max_retention_days,
        configured_network_ids=config.provided.configured_network_ids,
        purge_invalid_network_after_days=config.provided.purge_invalid_network_after_days,
    )
    sync_service = providers.Factory(
        SyncService,
        catalog=catalog_client,
        store=metadata_store,
        discover=discover_service,
        matcher=library_matcher,
        cleanup=cleanup_service,
        exclude_from_main_libraries=config.provided.exclude_from_main_libraries,
    )
    sort_service = providers.Factory(
        SortService,
        store=metadata_store,
        library=library_client,
        sort_order=config.provided.sort_order,
        mark_media_played=config.provided.mark_media_played,
    )
    recycle_service = providers.Factory(RecycleService, store=metadata_store)
