"""
Port du client de catalogue distant.

Définit le contrat utilisé par le moteur de découverte pour interroger
le service de requêtes/découverte (Jellyseerr).
"""

from abc import ABC, abstractmethod
from typing import Any

from jellybridge.core.entities import CatalogItem, MediaKind, Network


class ICatalogClient(ABC):
    """Interface du catalogue distant."""

    @abstractmethod
    async def get_status(self) -> dict[str, Any]:
        """
        Vérifie la disponibilité du service.

        Raises:
            UpstreamTimeoutError: Si le service est injoignable
            UpstreamHttpError: Si le service répond en erreur
        """
        ...

    @abstractmethod
    async def discover(self, kind: MediaKind, network: Network) -> list[CatalogItem]:
        """
        Récupère les items découverts pour un network.

        Les items retournés sont taggés avec le nom et l'id du network.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Libère les ressources HTTP."""
        ...
