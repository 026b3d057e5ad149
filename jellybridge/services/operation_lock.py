"""
Verrou global des opérations mutantes.

Une seule opération (sync, cleanup, sort, recycle) s'exécute à la fois.
Une opération concurrente attend la libération du verrou jusqu'à un délai
maximal, puis échoue avec OperationTimeoutError ; elle n'interrompt jamais
l'opération en cours. Les services exécutés sous le verrou ne prennent
eux-mêmes aucun verrou global.

Usage:
    lock = OperationLock()
    runner = OperationRunner(lock, default_timeout=600)
    result = await runner.run("sync", sync_service.sync)
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Optional

from loguru import logger

from jellybridge.core.errors import (
    JellyBridgeError,
    OperationAlreadyQueuedError,
    OperationTimeoutError,
)
from jellybridge.services.results import (
    OperationResult,
    OperationStatus,
    RunSummary,
    classify_error,
)


class OperationLock:
    """
    Verrou Idle -> Locked -> Idle avec attente bornée.

    Une seule attente par nom d'opération est admise : une seconde demande
    du même nom pendant qu'une première attend est rejetée.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._holder: Optional[str] = None
        self._waiting: set[str] = set()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def holder(self) -> Optional[str]:
        """Nom de l'opération détenant le verrou."""
        return self._holder

    @asynccontextmanager
    async def hold(self, operation: str, timeout: Optional[float] = None) -> AsyncIterator[None]:
        """
        Acquiert le verrou pour la durée du bloc.

        Args:
            operation: Nom de l'opération
            timeout: Attente maximale en secondes (None = illimitée)

        Raises:
            OperationTimeoutError: Si le verrou n'est pas libéré à temps
            OperationAlreadyQueuedError: Si une opération du même nom attend déjà
        """
        if self._lock.locked():
            if operation in self._waiting:
                raise OperationAlreadyQueuedError(operation)
            logger.info(f"Opération '{operation}' en attente de '{self._holder}'")

        self._waiting.add(operation)
        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=timeout)
        except asyncio.TimeoutError:
            raise OperationTimeoutError(operation, timeout or 0) from None
        finally:
            self._waiting.discard(operation)

        self._holder = operation
        logger.debug(f"Verrou acquis par '{operation}'")
        try:
            yield
        finally:
            self._holder = None
            self._lock.release()
            logger.debug(f"Verrou libéré par '{operation}'")


class OperationRunner:
    """Exécute une opération sous le verrou et produit un OperationResult."""

    def __init__(self, lock: OperationLock, default_timeout: float = 600) -> None:
        self._lock = lock
        self._default_timeout = default_timeout

    async def run(
        self,
        operation: str,
        action: Callable[[], Awaitable[RunSummary]],
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """
        Exécute `action` sous le verrou.

        Un verrou non obtenu donne le statut IN_PROGRESS ; toute autre
        exception donne FAILED avec sa classification.
        """
        wait = self._default_timeout if timeout is None else timeout
        with logger.contextualize(operation=operation):
            try:
                async with self._lock.hold(operation, timeout=wait):
                    summary = await action()
            except (OperationTimeoutError, OperationAlreadyQueuedError) as e:
                kind, message = classify_error(e)
                logger.warning(message)
                return OperationResult(operation, OperationStatus.IN_PROGRESS, message, kind)
            except (JellyBridgeError, OSError) as e:
                kind, message = classify_error(e)
                logger.error(f"Opération '{operation}' en échec : {message}")
                return OperationResult(operation, OperationStatus.FAILED, message, kind)
            except Exception as e:
                kind, message = classify_error(e)
                logger.exception(f"Erreur inattendue pendant '{operation}' : {e}")
                return OperationResult(operation, OperationStatus.FAILED, message, kind)

        status = OperationStatus.SUCCESS if summary.success else OperationStatus.FAILED
        return OperationResult(operation, status, summary.message, summary.error_kind, summary)
