"""
Client Jellyfin implémentant ILibraryGateway.

Interroge l'API REST Jellyfin pour énumérer les films et séries avec leurs
chemins et identifiants externes, lister les utilisateurs et mettre à jour
les données de lecture. Une réponse dont la structure ne correspond pas a
la version attendue du serveur lève IncompatibleLibraryError.
"""

from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from jellybridge.adapters.api.retry import request_with_retry
from jellybridge.core.entities import LibraryItem, LibraryUser, MediaKind
from jellybridge.core.errors import IncompatibleLibraryError, UpstreamHttpError
from jellybridge.core.ports.library import ILibraryGateway

_ITEM_TYPES = {
    MediaKind.MOVIE: "Movie",
    MediaKind.SHOW: "Series",
}


class JellyfinLibraryClient(ILibraryGateway):
    """
    Passerelle HTTP vers Jellyfin.

    L'index dossier -> item utilisé par find_item_by_directory est construit
    au premier appel puis conservé pour la durée de vie de l'instance.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        request_timeout: float = 60,
        retry_attempts: int = 3,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = request_timeout
        self._retry_attempts = retry_attempts
        self._client: Optional[httpx.AsyncClient] = None
        self._directory_index: Optional[dict[Path, LibraryItem]] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le crée si nécessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "X-Emby-Token": self._api_key,
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await request_with_retry(
            self._get_client(),
            "GET",
            url,
            max_attempts=self._retry_attempts,
            params=params,
        )
        try:
            return response.json()
        except ValueError as e:
            raise IncompatibleLibraryError(f"Réponse Jellyfin illisible pour {url}: {e}") from e

    async def get_items(self, kind: MediaKind) -> list[LibraryItem]:
        """Énumère les films ou séries de toutes les bibliothèques."""
        payload = await self._get_json(
            "/Items",
            params={
                "Recursive": "true",
                "IncludeItemTypes": _ITEM_TYPES[kind],
                "Fields": "Path,ProviderIds",
            },
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("Items"), list):
            raise IncompatibleLibraryError("Réponse /Items sans liste 'Items'")

        items = []
        for raw in payload["Items"]:
            try:
                items.append(_parse_item(raw, kind))
            except (KeyError, TypeError) as e:
                raise IncompatibleLibraryError(f"Item Jellyfin inattendu : {e}") from e
        return items

    async def find_item_by_directory(self, directory: Path) -> Optional[LibraryItem]:
        """Retrouve l'item dont le dossier est `directory`."""
        if self._directory_index is None:
            index: dict[Path, LibraryItem] = {}
            for kind in (MediaKind.MOVIE, MediaKind.SHOW):
                for item in await self.get_items(kind):
                    if item.directory is not None:
                        index.setdefault(item.directory, item)
            self._directory_index = index
        return self._directory_index.get(Path(directory))

    async def get_users(self) -> list[LibraryUser]:
        """Liste les utilisateurs Jellyfin."""
        payload = await self._get_json("/Users")
        if not isinstance(payload, list):
            raise IncompatibleLibraryError("Réponse /Users inattendue")
        try:
            return [LibraryUser(id=raw["Id"], name=raw.get("Name", "")) for raw in payload]
        except (KeyError, TypeError) as e:
            raise IncompatibleLibraryError(f"Utilisateur Jellyfin inattendu : {e}") from e

    async def update_play_count(
        self,
        user: LibraryUser,
        item: LibraryItem,
        play_count: int,
        played: bool,
    ) -> bool:
        """Met à jour PlayCount/Played via POST /UserItems/{id}/UserData."""
        try:
            await request_with_retry(
                self._get_client(),
                "POST",
                f"/UserItems/{item.id}/UserData",
                max_attempts=self._retry_attempts,
                params={"userId": user.id},
                json={"PlayCount": play_count, "Played": played},
            )
        except UpstreamHttpError as e:
            logger.warning(f"Lecture non mise à jour pour {item.name} ({user.name}) : {e}")
            return False
        return True


def _parse_item(raw: dict[str, Any], kind: MediaKind) -> LibraryItem:
    path = raw.get("Path")
    return LibraryItem(
        id=raw["Id"],
        name=raw.get("Name", ""),
        kind=kind,
        path=Path(path) if path else None,
        provider_ids=dict(raw.get("ProviderIds") or {}),
        year=raw.get("ProductionYear"),
    )
