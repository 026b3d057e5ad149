"""
Résultats structurés des opérations.

Chaque opération mutante (sync, cleanup, sort, recycle) retourne un
résultat portant succès/échec, un message lisible et une classification
de l'erreur.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from jellybridge.core.errors import (
    IncompatibleLibraryError,
    LibraryDirectoryError,
    OperationAlreadyQueuedError,
    OperationTimeoutError,
    UpstreamHttpError,
    UpstreamTimeoutError,
)


class OperationStatus(str, Enum):
    """Issue d'une opération."""

    SUCCESS = "success"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"  # verrou non obtenu : réessayer plus tard


class ErrorKind(str, Enum):
    """Classification des échecs d'opération."""

    CONNECTIVITY = "connectivity"
    HTTP = "http"
    FILESYSTEM = "filesystem"
    PERMISSION = "permission"
    INCOMPATIBLE = "incompatible"
    LOCK_TIMEOUT = "lock_timeout"
    UNKNOWN = "unknown"


@dataclass
class RunSummary:
    """Base des résultats de service (tous les champs ont une valeur par défaut)."""

    success: bool = True
    message: str = ""
    error_kind: Optional[ErrorKind] = None
    errors: list[str] = field(default_factory=list)

    def fail(self, message: str, kind: ErrorKind) -> "RunSummary":
        """Marque le résultat en échec et le retourne."""
        self.success = False
        self.message = message
        self.error_kind = kind
        return self


@dataclass
class OperationResult:
    """
    Résultat d'une opération exécutée sous le verrou.

    Attributs :
        operation : Nom de l'opération (sync, cleanup, sort, recycle)
        status : Issue (succès, échec, verrou non obtenu)
        message : Résumé lisible
        error_kind : Classification de l'échec
        summary : Résultat détaillé du service, si l'opération a démarré
    """

    operation: str
    status: OperationStatus
    message: str
    error_kind: Optional[ErrorKind] = None
    summary: Any = None

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.SUCCESS


def classify_error(error: BaseException) -> tuple[ErrorKind, str]:
    """
    Associe une exception à une classe d'erreur et un message lisible.

    Returns:
        Tuple (classification, message)
    """
    if isinstance(error, (OperationTimeoutError, OperationAlreadyQueuedError)):
        return ErrorKind.LOCK_TIMEOUT, str(error)
    if isinstance(error, UpstreamTimeoutError):
        return ErrorKind.CONNECTIVITY, f"Service distant injoignable : {error}"
    if isinstance(error, UpstreamHttpError):
        return ErrorKind.HTTP, f"Erreur du service distant ({error.code.value}) : {error}"
    if isinstance(error, IncompatibleLibraryError):
        return ErrorKind.INCOMPATIBLE, f"Version du serveur incompatible : {error}"
    if isinstance(error, (LibraryDirectoryError, FileNotFoundError, NotADirectoryError)):
        return ErrorKind.FILESYSTEM, f"Répertoire introuvable : {error}"
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION, f"Accès refusé : {error}"
    if isinstance(error, OSError):
        return ErrorKind.FILESYSTEM, f"Erreur d'entrée/sortie : {error}"
    return ErrorKind.UNKNOWN, f"Erreur inattendue : {error}"
