"""
Tests des commandes CLI (sync, cleanup, sort, recycle).

Le container DI est remplacé par un mock : on vérifie l'affichage et
les codes de sortie selon le résultat de l'opération.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from jellybridge.main import app
from jellybridge.services.recycle import RecycleResult
from jellybridge.services.results import ErrorKind, OperationResult, OperationStatus
from jellybridge.services.sync import SyncResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Évite la configuration des sinks loguru pendant les tests CLI."""
    with patch("jellybridge.main.configure_logging"):
        yield


@pytest.fixture
def mock_container():
    """Container mocké dont le runner retourne un résultat configurable."""
    container = MagicMock()
    container.operation_runner.return_value.run = AsyncMock()
    container.catalog_client.return_value.close = AsyncMock()
    container.library_client.return_value.close = AsyncMock()
    with patch("jellybridge.adapters.cli.commands.Container", return_value=container):
        yield container


class TestSyncCommand:
    """Tests pour la commande sync."""

    def test_success(self, mock_container) -> None:
        summary = SyncResult(message="Synchronisation terminée", added=3)
        mock_container.operation_runner.return_value.run.return_value = OperationResult(
            "sync", OperationStatus.SUCCESS, summary.message, summary=summary
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0
        assert "Synchronisation terminée" in result.output
        assert "added" in result.output
        mock_container.catalog_client.return_value.close.assert_awaited_once()
        mock_container.library_client.return_value.close.assert_awaited_once()

    def test_failure_exit_code(self, mock_container) -> None:
        mock_container.operation_runner.return_value.run.return_value = OperationResult(
            "sync", OperationStatus.FAILED, "Jellyseerr injoignable", ErrorKind.CONNECTIVITY
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 1
        assert "connectivity" in result.output

    def test_in_progress_exit_code(self, mock_container) -> None:
        mock_container.operation_runner.return_value.run.return_value = OperationResult(
            "sync", OperationStatus.IN_PROGRESS, "Opération 'sync' non démarrée",
            ErrorKind.LOCK_TIMEOUT,
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 2
        assert "Réessayer" in result.output


class TestOtherCommands:
    """Tests pour cleanup, sort et recycle."""

    @pytest.mark.parametrize("command", ["cleanup", "sort"])
    def test_operation_name_passed_to_runner(self, mock_container, command) -> None:
        run = mock_container.operation_runner.return_value.run
        run.return_value = OperationResult(command, OperationStatus.SUCCESS, "ok")

        result = runner.invoke(app, [command])

        assert result.exit_code == 0
        assert run.await_args.args[0] == command

    def test_recycle_requires_confirmation(self, mock_container) -> None:
        result = runner.invoke(app, ["recycle"], input="n\n")

        assert result.exit_code == 1
        mock_container.operation_runner.return_value.run.assert_not_awaited()

    def test_recycle_with_yes(self, mock_container) -> None:
        summary = RecycleResult(message="Bibliothèque vidée", directories_deleted=4)
        mock_container.operation_runner.return_value.run.return_value = OperationResult(
            "recycle", OperationStatus.SUCCESS, summary.message, summary=summary
        )

        result = runner.invoke(app, ["recycle", "--yes"])

        assert result.exit_code == 0
        assert "Bibliothèque vidée" in result.output


class TestInfoCommands:
    """Tests pour version et info."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "JellyBridge v" in result.output

    def test_info(self) -> None:
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Networks" in result.output
