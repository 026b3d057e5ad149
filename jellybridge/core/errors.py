"""
Hiérarchie d'erreurs du domaine JellyBridge.

Chaque erreur correspond à une classe d'échec distincte :
- UpstreamTimeoutError : échec transport après épuisement des tentatives
- UpstreamHttpError : réponse non-2xx, porte le code HTTP et un code domaine
- LibraryDirectoryError : répertoire de sortie absent ou non inscriptible
- IncompatibleLibraryError : réponse du serveur de bibliothèque inattendue
- OperationTimeoutError / OperationAlreadyQueuedError : verrou d'opération
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Codes domaine associés aux statuts HTTP de l'API distante."""

    AUTH_FAILED = "auth_failed"
    INSUFFICIENT_PRIVILEGES = "insufficient_privileges"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    HTTP_ERROR = "http_error"


def code_for_status(status_code: int) -> ErrorCode:
    """Convertit un statut HTTP en code domaine."""
    if status_code == 401:
        return ErrorCode.AUTH_FAILED
    if status_code == 403:
        return ErrorCode.INSUFFICIENT_PRIVILEGES
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code == 429:
        return ErrorCode.RATE_LIMITED
    if status_code >= 500:
        return ErrorCode.SERVICE_UNAVAILABLE
    return ErrorCode.HTTP_ERROR


class JellyBridgeError(Exception):
    """Erreur de base de JellyBridge."""


class UpstreamError(JellyBridgeError):
    """Échec de communication avec un service distant."""


class UpstreamTimeoutError(UpstreamError):
    """Le service distant n'a pas répondu après toutes les tentatives."""


class UpstreamHttpError(UpstreamError):
    """
    Le service distant a répondu avec un statut non-2xx.

    Attributes:
        status_code: Statut HTTP reçu
        code: Code domaine dérivé du statut
        url: URL appelée (optionnelle)
    """

    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.code = code_for_status(status_code)
        self.url = url
        target = f" ({url})" if url else ""
        super().__init__(f"HTTP {status_code} [{self.code.value}]{target}")


class LibraryDirectoryError(JellyBridgeError):
    """Le répertoire de la bibliothèque est absent ou inaccessible."""


class IncompatibleLibraryError(JellyBridgeError):
    """Le serveur de bibliothèque a renvoyé une structure inattendue."""


class OperationTimeoutError(JellyBridgeError):
    """Le verrou d'opération n'a pas pu être acquis dans le délai imparti."""

    def __init__(self, operation: str, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"Opération '{operation}' non démarrée : une autre opération "
            f"est en cours depuis plus de {timeout:.0f}s"
        )


class OperationAlreadyQueuedError(JellyBridgeError):
    """Une opération du même nom attend déjà le verrou."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Opération '{operation}' déjà en attente")
