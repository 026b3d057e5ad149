"""
Tests unitaires pour le moteur de correspondance.
"""

from pathlib import Path

import pytest

from jellybridge.core.entities import MediaKind
from jellybridge.core.errors import IncompatibleLibraryError
from jellybridge.services.matching import LibraryMatcher, match_library_items
from jellybridge.services.metadata_store import StoredItem


@pytest.fixture
def stored(library_dir):
    """Fabrique de StoredItem dans la bibliothèque placeholder."""

    def _make(item) -> StoredItem:
        return StoredItem(directory=library_dir / item.folder_name(), item=item)

    return _make


class TestMatchLibraryItems:
    """Tests pour match_library_items()."""

    def test_match_by_tmdb(self, stored, make_movie, make_library_item) -> None:
        placeholder = stored(make_movie())
        real = make_library_item(Tmdb="603")

        result = match_library_items([real], [placeholder])

        assert len(result.matched) == 1
        assert result.matched[0].placeholder is placeholder
        assert result.matched[0].library_item is real
        assert result.unmatched == []

    def test_fallback_ids(self, stored, make_movie, make_show, make_library_item) -> None:
        movie = stored(make_movie(imdb_id="tt0133093"))
        show = stored(make_show(tvdb_id=121361))
        real_movie = make_library_item(id="m", Imdb="tt0133093")
        real_show = make_library_item(id="s", kind=MediaKind.SHOW, Tvdb="121361")

        result = match_library_items([real_movie, real_show], [movie, show])

        assert len(result.matched) == 2

    def test_placeholder_paired_once(self, stored, make_movie, make_library_item) -> None:
        """Deux items réels identiques ne consomment qu'un placeholder."""
        placeholder = stored(make_movie())
        first = make_library_item(id="a", Tmdb="603")
        second = make_library_item(id="b", Tmdb="603")

        result = match_library_items([first, second], [placeholder])

        assert len(result.matched) == 1
        assert result.matched[0].library_item is first

    def test_first_placeholder_wins(self, stored, make_movie, make_library_item) -> None:
        """Deux placeholders du même item : le premier est apparié."""
        first = stored(make_movie())
        second = StoredItem(directory=Path("/elsewhere"), item=make_movie())
        real = make_library_item(Tmdb="603")

        result = match_library_items([real], [first, second])

        assert result.matched[0].placeholder is first
        assert result.unmatched == [second]

    def test_items_inside_placeholder_library_ignored(
        self, stored, library_dir, make_movie, make_library_item
    ) -> None:
        """Un item réel scanné dans la bibliothèque placeholder ne compte pas."""
        placeholder = stored(make_movie())
        real = make_library_item(
            Tmdb="603", path=placeholder.directory / "movie.mp4"
        )

        result = match_library_items([real], [placeholder], library_directory=library_dir)

        assert result.matched == []
        assert result.unmatched == [placeholder]

    def test_unmatched_order_preserved(self, stored, make_movie) -> None:
        items = [stored(make_movie(id=n, name=f"M{n}")) for n in (3, 1, 2)]

        result = match_library_items([], items)

        assert result.unmatched == items


class TestLibraryMatcher:
    """Tests pour LibraryMatcher.find_matches()."""

    @pytest.mark.asyncio
    async def test_queries_movies_and_shows(
        self, mock_library, library_dir, stored, make_show, make_library_item
    ) -> None:
        show = stored(make_show())
        mock_library.get_items.side_effect = lambda kind: (
            [make_library_item(kind=MediaKind.SHOW, Tmdb="1399")]
            if kind == MediaKind.SHOW
            else []
        )

        result = await LibraryMatcher(mock_library, library_dir).find_matches([show])

        assert len(result.matched) == 1
        assert mock_library.get_items.await_count == 2

    @pytest.mark.asyncio
    async def test_incompatible_library_degrades(
        self, mock_library, library_dir, stored, make_movie
    ) -> None:
        """Une bibliothèque incompatible donne zéro correspondance."""
        placeholder = stored(make_movie())
        mock_library.get_items.side_effect = IncompatibleLibraryError("v9")

        result = await LibraryMatcher(mock_library, library_dir).find_matches([placeholder])

        assert result.matched == []
        assert result.unmatched == [placeholder]
