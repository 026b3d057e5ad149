"""
Tests unitaires pour les utilitaires de noms de dossiers.
"""

from pathlib import Path

from jellybridge.utils.folders import is_path_in_directory, sanitize_folder_name


class TestSanitizeFolderName:
    """Tests pour sanitize_folder_name()."""

    def test_plain_name_unchanged(self) -> None:
        assert sanitize_folder_name("The Matrix (1999) [tmdbid-603]") == (
            "The Matrix (1999) [tmdbid-603]"
        )

    def test_colon_becomes_dash(self) -> None:
        assert sanitize_folder_name("Mission: Impossible") == "Mission - Impossible"

    def test_fullwidth_colon(self) -> None:
        """Le deux-points pleine chasse est traité comme un deux-points."""
        assert sanitize_folder_name("Star Wars： Andor") == "Star Wars - Andor"

    def test_curly_apostrophe(self) -> None:
        assert sanitize_folder_name("Ocean’s Eleven") == "Ocean's Eleven"

    def test_html_apostrophe(self) -> None:
        assert sanitize_folder_name("Schindler&#39;s List") == "Schindler's List"

    def test_forbidden_characters_replaced(self) -> None:
        result = sanitize_folder_name('What? If*  "Cut" <1/2>')
        for char in '?*"<>/':
            assert char not in result
        assert "  " not in result

    def test_zero_width_removed(self) -> None:
        assert sanitize_folder_name("Dark\u200b") == "Dark"

    def test_trailing_dots_and_spaces_removed(self) -> None:
        assert sanitize_folder_name("  Title... ") == "Title"

    def test_empty(self) -> None:
        assert sanitize_folder_name("") == ""


class TestIsPathInDirectory:
    """Tests pour is_path_in_directory()."""

    def test_child(self, tmp_path: Path) -> None:
        assert is_path_in_directory(tmp_path / "a" / "b", tmp_path)

    def test_same_directory(self, tmp_path: Path) -> None:
        assert is_path_in_directory(tmp_path, tmp_path)

    def test_sibling(self, tmp_path: Path) -> None:
        assert not is_path_in_directory(tmp_path / "other", tmp_path / "library")

    def test_prefix_is_not_parent(self, tmp_path: Path) -> None:
        """/x/Library2 n'est pas sous /x/Library."""
        assert not is_path_in_directory(tmp_path / "Library2", tmp_path / "Library")
