"""
Verrous asyncio par clé ("single-flight").

Fournit un registre get-or-create de verrous fins : deux tâches demandant
la même clé s'exécutent l'une après l'autre, des clés distinctes avancent
en parallèle.

Usage:
    locks = KeyedLock()
    async with locks.acquire(cache_path):
        ...
"""

import asyncio
import threading
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """Registre de verrous asyncio indexés par clé."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: Hashable) -> asyncio.Lock:
        """Retourne le verrou associé à la clé, le crée si nécessaire."""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            return lock

    @asynccontextmanager
    async def acquire(self, key: Hashable) -> AsyncIterator[None]:
        """Contexte async tenant le verrou de la clé."""
        async with self.get(key):
            yield

    def __len__(self) -> int:
        return len(self._locks)
