"""
Tests unitaires pour CleanupService.
"""

from datetime import timedelta

import pytest

from jellybridge.core.entities import Network
from jellybridge.core.errors import LibraryDirectoryError
from jellybridge.services.cleanup import CleanupResult, CleanupService
from jellybridge.services.metadata_store import FolderMetadataStore

HULU = Network(name="Hulu", id=15)
CONFIGURED = {8, 337}


@pytest.fixture
def cleanup_service(store, mock_generator) -> CleanupService:
    return CleanupService(store, mock_generator, retention_days=30, configured_network_ids=CONFIGURED)


class TestRetention:
    """Tests pour delete_expired_items()."""

    def test_boundary(self, cleanup_service, store, make_movie, make_show, utc_now) -> None:
        """Un jour de plus que la retention : supprime ; un jour de moins : conserve."""
        old = make_movie(id=1, name="Ancien")
        recent = make_show(id=2, name="Recent")
        store.write_item(old, now=utc_now - timedelta(days=31))
        store.write_item(recent, now=utc_now - timedelta(days=29))
        result = CleanupResult()

        kept = cleanup_service.delete_expired_items(store.read_items(), result, utc_now)

        assert [stored.item.id for stored in kept] == [2]
        assert result.movies_deleted == 1
        assert result.shows_deleted == 0
        assert result.items_processed == 2
        assert not store.item_directory(old).exists()
        assert store.item_directory(recent).exists()

    def test_missing_created_date_is_expired(
        self, cleanup_service, store, make_movie, utc_now
    ) -> None:
        movie = make_movie()
        store.write_item(movie)
        [stored] = store.read_items()
        stored.item.created_date = None
        result = CleanupResult()

        kept = cleanup_service.delete_expired_items([stored], result, utc_now)

        assert kept == []
        assert result.movies_deleted == 1

    def test_invalid_network_never_expires(
        self, cleanup_service, store, make_movie, utc_now
    ) -> None:
        """Un item au network non configure n'est pas touche par la retention."""
        movie = make_movie(network=HULU)
        store.write_item(movie, now=utc_now - timedelta(days=365))
        result = CleanupResult()

        kept = cleanup_service.delete_expired_items(store.read_items(), result, utc_now)

        assert len(kept) == 1
        assert store.item_directory(movie).exists()
        assert result.items_processed == 0


class TestOrphans:
    """Tests pour delete_orphan_folders()."""

    def test_descriptor_without_metadata_deleted(
        self, cleanup_service, store, library_dir, make_movie
    ) -> None:
        orphan = library_dir / "Orphelin (2001) [tmdbid-9]"
        orphan.mkdir()
        (orphan / "movie.nfo").write_text("<movie/>", encoding="utf-8")
        show_orphan = library_dir / "Serie orpheline"
        show_orphan.mkdir()
        (show_orphan / "tvshow.nfo").write_text("<tvshow/>", encoding="utf-8")
        store.write_item(make_movie())
        result = CleanupResult()

        cleanup_service.delete_orphan_folders(result)

        assert not orphan.exists()
        assert not show_orphan.exists()
        assert result.orphan_movies_deleted == 1
        assert result.orphan_shows_deleted == 1
        assert result.orphans_processed == 1
        assert result.movies_cleaned == 1
        assert store.item_directory(make_movie()).exists()


class TestInvalidNetworkPurge:
    """Tests pour purge_invalid_network_items()."""

    def test_no_policy_keeps_everything(
        self, cleanup_service, store, make_movie, utc_now
    ) -> None:
        store.write_item(make_movie(network=HULU), now=utc_now - timedelta(days=400))
        store.write_ignore(store.item_directory(make_movie(network=HULU)))
        result = CleanupResult()

        kept = cleanup_service.purge_invalid_network_items(store.read_items(), result, utc_now)

        assert len(kept) == 1
        assert result.invalid_network_purged == 0

    def test_policy_purges_old_ignored_items(
        self, store, mock_generator, make_movie, utc_now
    ) -> None:
        service = CleanupService(
            store,
            mock_generator,
            retention_days=30,
            configured_network_ids=CONFIGURED,
            purge_invalid_network_after_days=90,
        )
        old = make_movie(id=1, name="Vieux", network=HULU)
        young = make_movie(id=2, name="Jeune", network=HULU)
        not_ignored = make_movie(id=3, name="Non marque", network=HULU)
        store.write_item(old, now=utc_now - timedelta(days=91))
        store.write_item(young, now=utc_now - timedelta(days=10))
        store.write_item(not_ignored, now=utc_now - timedelta(days=200))
        store.write_ignore(store.item_directory(old))
        store.write_ignore(store.item_directory(young))
        result = CleanupResult()

        kept = service.purge_invalid_network_items(store.read_items(), result, utc_now)

        assert sorted(stored.item.id for stored in kept) == [2, 3]
        assert result.invalid_network_purged == 1
        assert not store.item_directory(old).exists()


class TestCleanup:
    """Tests pour cleanup()."""

    @pytest.mark.asyncio
    async def test_missing_placeholders_recreated(
        self, cleanup_service, store, mock_generator, make_movie, make_show
    ) -> None:
        store.write_items([make_movie(), make_show()])
        ignored = make_movie(id=5, name="Deja en bibliotheque")
        store.write_item(ignored)
        store.write_ignore(store.item_directory(ignored))

        result = await cleanup_service.cleanup()

        assert result.success
        assert result.placeholders_created == 2
        assert result.items_deleted == 0
        assert mock_generator.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_placeholder_failure_reported(
        self, cleanup_service, store, mock_generator, make_movie
    ) -> None:
        store.write_item(make_movie())
        mock_generator.generate.side_effect = None
        mock_generator.generate.return_value = False

        result = await cleanup_service.cleanup()

        assert result.placeholders_created == 0
        assert len(result.errors) == 1

    @pytest.mark.asyncio
    async def test_idempotent(self, cleanup_service, store, make_movie, utc_now) -> None:
        store.write_item(make_movie(id=1, name="Ancien"), now=utc_now - timedelta(days=60))
        store.write_item(make_movie(id=2, name="Recent"), now=utc_now)

        first = await cleanup_service.cleanup(now=utc_now)
        second = await cleanup_service.cleanup(now=utc_now)

        assert first.items_deleted == 1
        assert second.items_deleted == 0
        assert second.placeholders_created == 0

    @pytest.mark.asyncio
    async def test_missing_library_raises(self, tmp_path, mock_generator) -> None:
        service = CleanupService(
            FolderMetadataStore(tmp_path / "absent"),
            mock_generator,
            retention_days=30,
            configured_network_ids=CONFIGURED,
        )

        with pytest.raises(LibraryDirectoryError):
            await service.cleanup()
