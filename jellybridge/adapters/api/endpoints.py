"""
Registre des endpoints de l'API Jellyseerr.

Chaque endpoint déclare son chemin, sa méthode et son mode de
récupération (paginé par page/totalPages ou requête unique avec take).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Endpoint(str, Enum):
    """Endpoints connus de l'API Jellyseerr."""

    STATUS = "status"
    AUTH_ME = "auth_me"
    USER_LIST = "user_list"
    READ_REQUESTS = "read_requests"
    CREATE_REQUEST = "create_request"
    DISCOVER_MOVIES = "discover_movies"
    DISCOVER_TV = "discover_tv"
    WATCH_PROVIDER_REGIONS = "watch_provider_regions"
    WATCH_PROVIDERS_MOVIES = "watch_providers_movies"
    WATCH_PROVIDERS_TV = "watch_providers_tv"


@dataclass(frozen=True)
class EndpointConfig:
    """
    Description d'un endpoint.

    Attributs :
        path : Chemin relatif à l'URL de base
        method : Méthode HTTP
        paginated : Récupération page par page (paramètre page)
        take : Taille de page pour les endpoints récupérés en une requête
        description : Libellé pour les logs
    """

    path: str
    method: str = "GET"
    paginated: bool = False
    take: Optional[int] = None
    description: str = ""


ENDPOINTS: dict[Endpoint, EndpointConfig] = {
    Endpoint.STATUS: EndpointConfig("/api/v1/status", description="Statut du service"),
    Endpoint.AUTH_ME: EndpointConfig("/api/v1/auth/me", description="Utilisateur courant"),
    Endpoint.USER_LIST: EndpointConfig(
        "/api/v1/user", take=1000, description="Liste des utilisateurs"
    ),
    Endpoint.READ_REQUESTS: EndpointConfig(
        "/api/v1/request", take=1000, description="Liste des requêtes"
    ),
    Endpoint.CREATE_REQUEST: EndpointConfig(
        "/api/v1/request", method="POST", description="Création de requête"
    ),
    Endpoint.DISCOVER_MOVIES: EndpointConfig(
        "/api/v1/discover/movies", paginated=True, description="Films découverts"
    ),
    Endpoint.DISCOVER_TV: EndpointConfig(
        "/api/v1/discover/tv", paginated=True, description="Séries découvertes"
    ),
    Endpoint.WATCH_PROVIDER_REGIONS: EndpointConfig(
        "/api/v1/watchproviders/regions", description="Régions disponibles"
    ),
    Endpoint.WATCH_PROVIDERS_MOVIES: EndpointConfig(
        "/api/v1/watchproviders/movies", description="Fournisseurs films"
    ),
    Endpoint.WATCH_PROVIDERS_TV: EndpointConfig(
        "/api/v1/watchproviders/tv", description="Fournisseurs séries"
    ),
}
