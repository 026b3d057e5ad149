"""
Tests unitaires pour OperationLock et OperationRunner.
"""

import asyncio

import pytest

from jellybridge.core.errors import (
    LibraryDirectoryError,
    OperationAlreadyQueuedError,
    OperationTimeoutError,
    UpstreamTimeoutError,
)
from jellybridge.services.operation_lock import OperationLock, OperationRunner
from jellybridge.services.results import ErrorKind, OperationStatus, RunSummary


class TestOperationLock:
    """Tests pour le verrou d'opération."""

    @pytest.mark.asyncio
    async def test_hold_and_release(self) -> None:
        lock = OperationLock()

        async with lock.hold("sync"):
            assert lock.locked
            assert lock.holder == "sync"

        assert not lock.locked
        assert lock.holder is None

    @pytest.mark.asyncio
    async def test_released_on_exception(self) -> None:
        """Le verrou est libéré même si l'opération échoue."""
        lock = OperationLock()

        with pytest.raises(RuntimeError):
            async with lock.hold("sync"):
                raise RuntimeError("boom")

        assert not lock.locked

    @pytest.mark.asyncio
    async def test_waiter_times_out_without_interrupting_holder(self) -> None:
        """B attend puis échoue ; A termine normalement."""
        lock = OperationLock()
        started = asyncio.Event()
        finish = asyncio.Event()
        completed = []

        async def operation_a() -> None:
            async with lock.hold("sync"):
                started.set()
                await finish.wait()
                completed.append("sync")

        task = asyncio.create_task(operation_a())
        await started.wait()

        with pytest.raises(OperationTimeoutError):
            async with lock.hold("cleanup", timeout=0.05):
                pass

        finish.set()
        await task
        assert completed == ["sync"]
        assert not lock.locked

    @pytest.mark.asyncio
    async def test_waiter_runs_after_release(self) -> None:
        """Une opération en attente démarre dès que le verrou est libéré."""
        lock = OperationLock()
        order = []
        started = asyncio.Event()

        async def first() -> None:
            async with lock.hold("sync"):
                started.set()
                await asyncio.sleep(0.01)
                order.append("sync")

        async def second() -> None:
            await started.wait()
            async with lock.hold("cleanup", timeout=5):
                order.append("cleanup")

        await asyncio.gather(first(), second())

        assert order == ["sync", "cleanup"]

    @pytest.mark.asyncio
    async def test_same_operation_queued_twice(self) -> None:
        """Une seconde attente du même nom est rejetée."""
        lock = OperationLock()
        started = asyncio.Event()
        finish = asyncio.Event()

        async def holder() -> None:
            async with lock.hold("sync"):
                started.set()
                await finish.wait()

        async def waiter() -> None:
            async with lock.hold("cleanup", timeout=5):
                pass

        holding = asyncio.create_task(holder())
        await started.wait()
        waiting = asyncio.create_task(waiter())
        await asyncio.sleep(0)

        with pytest.raises(OperationAlreadyQueuedError):
            async with lock.hold("cleanup", timeout=5):
                pass

        finish.set()
        await asyncio.gather(holding, waiting)


class TestOperationRunner:
    """Tests pour OperationRunner.run()."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        runner = OperationRunner(OperationLock())

        async def action() -> RunSummary:
            return RunSummary(message="ok")

        result = await runner.run("sync", action)

        assert result.status == OperationStatus.SUCCESS
        assert result.success
        assert result.message == "ok"

    @pytest.mark.asyncio
    async def test_failed_summary(self) -> None:
        runner = OperationRunner(OperationLock())

        async def action() -> RunSummary:
            return RunSummary().fail("aucun item", ErrorKind.CONNECTIVITY)

        result = await runner.run("sync", action)

        assert result.status == OperationStatus.FAILED
        assert result.error_kind == ErrorKind.CONNECTIVITY

    @pytest.mark.asyncio
    async def test_lock_timeout_is_in_progress(self) -> None:
        """Un verrou non obtenu donne IN_PROGRESS."""
        lock = OperationLock()
        runner = OperationRunner(lock, default_timeout=0.05)

        async def action() -> RunSummary:
            return RunSummary()

        async with lock.hold("sync"):
            result = await runner.run("cleanup", action)

        assert result.status == OperationStatus.IN_PROGRESS
        assert result.error_kind == ErrorKind.LOCK_TIMEOUT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, kind",
        [
            (UpstreamTimeoutError("down"), ErrorKind.CONNECTIVITY),
            (LibraryDirectoryError("absent"), ErrorKind.FILESYSTEM),
            (PermissionError("denied"), ErrorKind.PERMISSION),
        ],
    )
    async def test_errors_classified(self, error: Exception, kind: ErrorKind) -> None:
        runner = OperationRunner(OperationLock())

        async def action() -> RunSummary:
            raise error

        result = await runner.run("sync", action)

        assert result.status == OperationStatus.FAILED
        assert result.error_kind == kind

    @pytest.mark.asyncio
    async def test_unexpected_error_is_failed_and_releases_lock(self) -> None:
        """Une exception imprévue donne FAILED / UNKNOWN sans bloquer le verrou."""
        lock = OperationLock()
        runner = OperationRunner(lock)

        async def action() -> RunSummary:
            raise KeyError("Id")

        result = await runner.run("sort", action)

        assert result.status == OperationStatus.FAILED
        assert result.error_kind == ErrorKind.UNKNOWN
        assert "Id" in result.message
        assert not lock.locked
