"""
Client Jellyseerr pour la découverte et les requêtes.

Implémente ICatalogClient. Chaque appel physique passe par
request_with_retry ; les endpoints paginés sont agrégés page par page.

Usage:
    client = JellyseerrClient(base_url="http://localhost:5055", api_key="xxx")
    status = await client.get_status()
    movies = await client.discover(MediaKind.MOVIE, Network("Netflix", 8))
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from jellybridge.adapters.api.endpoints import ENDPOINTS, Endpoint
from jellybridge.adapters.api.retry import request_with_retry
from jellybridge.core.entities import CatalogItem, MediaKind, Network
from jellybridge.core.entities.catalog import item_class_for
from jellybridge.core.ports.catalog import ICatalogClient

_DISCOVER_ENDPOINTS = {
    MediaKind.MOVIE: Endpoint.DISCOVER_MOVIES,
    MediaKind.SHOW: Endpoint.DISCOVER_TV,
}

_WATCH_PROVIDER_ENDPOINTS = {
    MediaKind.MOVIE: Endpoint.WATCH_PROVIDERS_MOVIES,
    MediaKind.SHOW: Endpoint.WATCH_PROVIDERS_TV,
}


class JellyseerrClient(ICatalogClient):
    """
    Client API Jellyseerr.

    Fournit:
    - Un appel générique fetch(endpoint, params) avec pagination
    - La découverte par network (films et séries)
    - Les utilisateurs, fournisseurs et création de requêtes

    Les erreurs de transport sont relancées (retry_attempts tentatives,
    backoff 1s -> 60s) puis levées en UpstreamTimeoutError ; les statuts
    non-2xx lèvent UpstreamHttpError. Un JSON invalide est journalisé et
    donne un résultat vide.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        request_timeout: float = 60,
        retry_attempts: int = 3,
        max_discover_pages: int = 1,
        region: str = "US",
        max_wait: float = 60,
        min_wait: float = 1,
    ) -> None:
        """
        Initialise le client Jellyseerr.

        Args:
            base_url: URL du serveur Jellyseerr
            api_key: Clé API (header X-Api-Key)
            request_timeout: Timeout par requête en secondes
            retry_attempts: Nombre de tentatives par appel
            max_discover_pages: Nombre maximum de pages (0 = illimité)
            region: Région des networks sans pays explicite
            max_wait: Plafond du backoff entre tentatives
            min_wait: Plancher du backoff entre tentatives
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = request_timeout
        self._retry_attempts = retry_attempts
        self._max_pages = max_discover_pages
        self._region = region
        self._max_wait = max_wait
        self._min_wait = min_wait
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le crée si nécessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "X-Api-Key": self._api_key,
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

    async def _send(
        self,
        endpoint: Endpoint,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        config = ENDPOINTS[endpoint]
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json
        return await request_with_retry(
            self._get_client(),
            config.method,
            config.path,
            max_attempts=self._retry_attempts,
            max_wait=self._max_wait,
            min_wait=self._min_wait,
            **kwargs,
        )

    async def _request_json(
        self,
        endpoint: Endpoint,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Exécute un appel et décode le JSON.

        Returns:
            Le payload décodé, ou None si le corps n'est pas du JSON valide
        """
        response = await self._send(endpoint, params=params, json=json)
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Jellyseerr {endpoint.value} : réponse JSON invalide ({e})")
            return None

    async def fetch(
        self,
        endpoint: Endpoint,
        params: Optional[dict[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """
        Récupère tous les résultats d'un endpoint.

        Pour un endpoint paginé, les pages sont demandées séquentiellement
        à partir de 1 et leurs "results" concaténés. L'arrêt intervient sur
        la limite de pages, une page vide, la dernière page annoncée ou un
        JSON invalide (les pages déjà reçues sont conservées).

        Args:
            endpoint: Endpoint à appeler
            params: Paramètres de requête additionnels

        Returns:
            Liste des résultats bruts
        """
        config = ENDPOINTS[endpoint]
        query = dict(params or {})

        if not config.paginated:
            if config.take is not None:
                query.setdefault("take", config.take)
            payload = await self._request_json(endpoint, params=query)
            return _extract_results(payload) or []

        results: list[dict[str, Any]] = []
        page = 1
        while self._max_pages == 0 or page <= self._max_pages:
            payload = await self._request_json(endpoint, params={**query, "page": page})
            page_results = _extract_results(payload)
            if page_results is None:
                logger.warning(
                    f"Jellyseerr {endpoint.value} : page {page} illisible, arrêt de la pagination"
                )
                break
            if not page_results:
                break
            results.extend(page_results)

            total_pages = payload.get("totalPages") if isinstance(payload, dict) else None
            if isinstance(total_pages, int) and page >= total_pages:
                break
            page += 1

        logger.debug(f"Jellyseerr {endpoint.value} : {len(results)} résultats ({page} page(s))")
        return results

    async def get_status(self) -> dict[str, Any]:
        """Vérifie que Jellyseerr répond (GET /api/v1/status)."""
        payload = await self._request_json(Endpoint.STATUS)
        return payload if isinstance(payload, dict) else {}

    async def discover(self, kind: MediaKind, network: Network) -> list[CatalogItem]:
        """
        Récupère les items découverts pour un network, triés par popularité.

        Les entrées malformées sont ignorées avec un avertissement.
        """
        params = {
            "watchRegion": network.country or self._region,
            "watchProviders": network.id,
            "sortBy": "popularity.desc",
        }
        raw_items = await self.fetch(_DISCOVER_ENDPOINTS[kind], params)

        item_class = item_class_for(kind)
        items: list[CatalogItem] = []
        for raw in raw_items:
            try:
                item = item_class.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Item {kind.value} ignore pour {network.name} : {e}")
                continue
            item.network_tag = network.name
            item.network_id = network.id
            items.append(item)
        return items

    async def get_users(self) -> list[dict[str, Any]]:
        """Liste les utilisateurs Jellyseerr."""
        return await self.fetch(Endpoint.USER_LIST)

    async def get_requests(self) -> list[dict[str, Any]]:
        """Liste les requêtes existantes."""
        return await self.fetch(Endpoint.READ_REQUESTS)

    async def get_watch_providers(self, kind: MediaKind, region: str) -> list[Network]:
        """
        Liste les fournisseurs disponibles pour une région.

        Args:
            kind: Type de média (films ou séries)
            region: Code de région (ex: "US")

        Returns:
            Liste de Network triés par priorité d'affichage
        """
        payload = await self._request_json(
            _WATCH_PROVIDER_ENDPOINTS[kind], params={"watchRegion": region}
        )
        if not isinstance(payload, list):
            return []
        networks = []
        for raw in payload:
            try:
                networks.append(
                    Network(
                        name=raw["name"],
                        id=int(raw["id"]),
                        country=region,
                        priority=int(raw.get("displayPriority") or 0),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Fournisseur ignore : {e}")
        return sorted(networks, key=lambda n: n.priority)

    async def create_request(
        self,
        kind: MediaKind,
        media_id: int,
        user_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Crée une requête Jellyseerr au nom d'un utilisateur.

        Les séries sont demandées pour toutes les saisons.
        """
        body: dict[str, Any] = {"mediaType": kind.value, "mediaId": media_id}
        if kind == MediaKind.SHOW:
            body["seasons"] = "all"
        if user_id is not None:
            body["userId"] = user_id
        payload = await self._request_json(Endpoint.CREATE_REQUEST, json=body)
        return payload if isinstance(payload, dict) else {}


def _extract_results(payload: Any) -> Optional[list[dict[str, Any]]]:
    """
    Extrait la liste "results" d'une réponse.

    Returns:
        La liste des résultats, ou None si la structure est invalide
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        results = payload.get("results")
        if isinstance(results, list):
            return results
    return None
