"""
Mecanisme de retry avec backoff exponentiel pour les API externes.

Chaque appel physique est relance sur erreur de transport (connexion,
timeout) et sur les statuts transitoires (429, 5xx), avec un delai
de 1s, 2s, 4s... plafonne a 60s. Les autres statuts non-2xx sont
propages immediatement sous forme d'UpstreamHttpError.

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=3)
    async def my_api_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(client, "GET", url)
"""

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jellybridge.core.errors import UpstreamHttpError, UpstreamTimeoutError

# Statuts consideres comme transitoires (relances)
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class TransientStatusError(Exception):
    """
    Exception interne levee pour un statut HTTP transitoire.

    Attributes:
        status_code: Statut HTTP recu
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Transient HTTP status {status_code}")


def _log_retry(retry_state: RetryCallState) -> None:
    """Trace chaque nouvelle tentative."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(
        f"Tentative {retry_state.attempt_number} echouee ({error}), nouvelle tentative"
    )


def with_retry(max_attempts: int = 3, max_wait: float = 60, min_wait: float = 1):
    """
    Decorateur pour relancer sur erreur de transport ou statut transitoire.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)
        min_wait: Delai minimum entre les tentatives en secondes (defaut: 1)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type((httpx.TransportError, TransientStatusError)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    max_wait: float = 60,
    min_wait: float = 1,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre deux tentatives
        min_wait: Delai minimum entre deux tentatives
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes (2xx)

    Raises:
        UpstreamTimeoutError: Si le transport echoue a chaque tentative
        UpstreamHttpError: Pour une reponse non-2xx
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait, min_wait=min_wait)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise TransientStatusError(response.status_code)
        return response

    try:
        response = await _do_request()
    except httpx.TransportError as e:
        raise UpstreamTimeoutError(
            f"{method} {url} : echec apres {max_attempts} tentatives ({e!r})"
        ) from e
    except TransientStatusError as e:
        raise UpstreamHttpError(e.status_code, url) from e

    if response.is_error:
        raise UpstreamHttpError(response.status_code, url)
    return response
