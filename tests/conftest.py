"""
Fixtures pytest partagées pour les tests JellyBridge.

Ce module contient les fixtures communes utilisées dans les tests:
- Fabriques d'items du catalogue (films, séries)
- Stockage de dossiers placeholder dans un répertoire temporaire
- Mocks des ports (catalogue, bibliothèque) et du générateur de placeholders
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from jellybridge.config import Settings
from jellybridge.core.entities import LibraryItem, MediaKind, MovieItem, Network, ShowItem
from jellybridge.core.ports.catalog import ICatalogClient
from jellybridge.core.ports.library import ILibraryGateway
from jellybridge.services.metadata_store import FolderMetadataStore
from jellybridge.services.placeholder_generator import PlaceholderVideoGenerator

NETFLIX = Network(name="Netflix", id=8, country="US", priority=4)
DISNEY = Network(name="Disney Plus", id=337, country="US", priority=1)


@pytest.fixture
def networks() -> list[Network]:
    """Networks configurés pour les tests."""
    return [NETFLIX, DISNEY]


@pytest.fixture
def make_movie() -> Callable[..., MovieItem]:
    """Fabrique de MovieItem taggés Netflix par défaut."""

    def _make(
        id: int = 603,
        name: str = "The Matrix",
        date: Optional[str] = "1999-03-31",
        network: Network = NETFLIX,
        **kwargs,
    ) -> MovieItem:
        return MovieItem(
            id=id,
            name=name,
            date=date,
            network_tag=network.name,
            network_id=network.id,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_show() -> Callable[..., ShowItem]:
    """Fabrique de ShowItem taggés Netflix par défaut."""

    def _make(
        id: int = 1399,
        name: str = "Game of Thrones",
        date: Optional[str] = "2011-04-17",
        network: Network = NETFLIX,
        **kwargs,
    ) -> ShowItem:
        return ShowItem(
            id=id,
            name=name,
            date=date,
            network_tag=network.name,
            network_id=network.id,
            **kwargs,
        )

    return _make


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    """Racine de la bibliothèque placeholder (existante)."""
    directory = tmp_path / "JellyBridge"
    directory.mkdir()
    return directory


@pytest.fixture
def store(library_dir: Path) -> FolderMetadataStore:
    """Stockage de dossiers sur la bibliothèque temporaire."""
    return FolderMetadataStore(library_dir)


@pytest.fixture
def mock_catalog() -> AsyncMock:
    """Mock de ICatalogClient (statut OK, aucun item par défaut)."""
    catalog = AsyncMock(spec=ICatalogClient)
    catalog.get_status.return_value = {"version": "2.0.0"}
    catalog.discover.return_value = []
    return catalog


@pytest.fixture
def mock_library() -> AsyncMock:
    """Mock de ILibraryGateway (bibliothèque vide par défaut)."""
    library = AsyncMock(spec=ILibraryGateway)
    library.get_items.return_value = []
    library.get_users.return_value = []
    library.find_item_by_directory.return_value = None
    library.update_play_count.return_value = True
    return library


@pytest.fixture
def mock_generator() -> MagicMock:
    """
    Mock du générateur de placeholders.

    generate() écrit un faux fichier vidéo à l'emplacement canonique,
    has_placeholder() utilise la vraie implémentation.
    """
    generator = MagicMock(spec=PlaceholderVideoGenerator)

    async def fake_generate(kind, folder: Path) -> bool:
        target = PlaceholderVideoGenerator.target_path(folder, kind)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"video")
        return True

    generator.generate = AsyncMock(side_effect=fake_generate)
    generator.has_placeholder.side_effect = PlaceholderVideoGenerator.has_placeholder
    return generator


@pytest.fixture
def test_settings(tmp_path: Path, library_dir: Path) -> Settings:
    """Settings de test avec chemins temporaires."""
    return Settings(
        library_directory=library_dir,
        cache_directory=tmp_path / "cache",
        log_file=tmp_path / "logs" / "test.log",
        _env_file=None,
    )


@pytest.fixture
def make_library_item() -> Callable[..., LibraryItem]:
    """Fabrique de LibraryItem avec identifiants externes en kwargs."""

    def _make(
        id: str = "abc",
        name: str = "The Matrix",
        kind: MediaKind = MediaKind.MOVIE,
        path: Optional[Path] = None,
        **provider_ids: str,
    ) -> LibraryItem:
        return LibraryItem(
            id=id, name=name, kind=kind, path=path, provider_ids=dict(provider_ids)
        )

    return _make


@pytest.fixture
def utc_now() -> datetime:
    """Instant de référence fixe pour les tests de rétention."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
