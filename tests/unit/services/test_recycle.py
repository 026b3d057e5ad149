"""
Tests unitaires pour RecycleService.
"""

import pytest

from jellybridge.core.errors import LibraryDirectoryError
from jellybridge.services.metadata_store import FolderMetadataStore
from jellybridge.services.recycle import RecycleService


class TestRecycleLibrary:
    """Tests pour recycle_library()."""

    @pytest.mark.asyncio
    async def test_empties_library_keeps_root(
        self, store, library_dir, make_movie, make_show
    ) -> None:
        store.write_items([make_movie(), make_show()])
        store.write_ignore(store.item_directory(make_movie()))
        (library_dir / "notes.txt").write_text("x", encoding="utf-8")

        result = await RecycleService(store).recycle_library()

        assert result.success
        assert result.directories_deleted == 2
        assert result.files_deleted == 1
        assert library_dir.is_dir()
        assert list(library_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_library(self, tmp_path) -> None:
        with pytest.raises(LibraryDirectoryError):
            await RecycleService(FolderMetadataStore(tmp_path / "absent")).recycle_library()
