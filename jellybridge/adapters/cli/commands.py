"""
Commandes CLI des opérations mutantes : sync, cleanup, sort, recycle.

Chaque commande exécute son opération sous le verrou global et affiche
un résumé. Code de sortie : 0 succès, 1 échec, 2 opération déjà en cours.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from jellybridge.container import Container
from jellybridge.services.results import OperationResult, OperationStatus, RunSummary

console = Console()

EXIT_FAILED = 1
EXIT_IN_PROGRESS = 2

ActionFactory = Callable[[Container], Callable[[], Awaitable[RunSummary]]]


async def _run_operation(operation: str, action_factory: ActionFactory) -> OperationResult:
    """Exécute une opération sous le verrou puis ferme les clients HTTP."""
    container = Container()
    runner = container.operation_runner()
    try:
        return await runner.run(operation, action_factory(container))
    finally:
        await container.catalog_client().close()
        await container.library_client().close()


def _summary_table(result: OperationResult) -> Table:
    table = Table(title=f"Opération {result.operation}", show_header=False)
    table.add_column("Champ", style="cyan")
    table.add_column("Valeur")
    summary = result.summary
    if summary is None:
        return table
    for name, value in vars(summary).items():
        if name in ("success", "message", "error_kind", "errors") or isinstance(value, RunSummary):
            continue
        if isinstance(value, list):
            value = len(value)
        table.add_row(name, str(value))
    return table


def _report(result: OperationResult) -> None:
    """Affiche le résultat et sort avec le code approprié."""
    if result.status == OperationStatus.IN_PROGRESS:
        console.print(f"[yellow]{result.message}[/yellow]")
        console.print("[yellow]Réessayer plus tard.[/yellow]")
        raise typer.Exit(EXIT_IN_PROGRESS)

    if result.summary is not None:
        console.print(_summary_table(result))
        for error in result.summary.errors:
            console.print(f"[red]  - {error}[/red]")

    if result.status == OperationStatus.FAILED:
        kind = result.error_kind.value if result.error_kind else "unknown"
        console.print(f"[red]Échec ({kind}) : {result.message}[/red]")
        raise typer.Exit(EXIT_FAILED)

    console.print(f"[green]{result.message}[/green]")


def sync() -> None:
    """Synchronise la découverte Jellyseerr vers la bibliothèque placeholder."""
    result = asyncio.run(_run_operation("sync", lambda c: c.sync_service().sync))
    _report(result)


def cleanup() -> None:
    """Supprime les dossiers expirés ou orphelins."""
    result = asyncio.run(_run_operation("cleanup", lambda c: c.cleanup_service().cleanup))
    _report(result)


def sort() -> None:
    """Applique l'ordre de tri configuré (compteurs de lecture)."""
    result = asyncio.run(_run_operation("sort", lambda c: c.sort_service().sort_library))
    _report(result)


def recycle(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Confirmer sans question"),
    ] = False,
) -> None:
    """Vide entièrement la bibliothèque placeholder."""
    if not yes:
        typer.confirm("Supprimer tout le contenu de la bibliothèque placeholder ?", abort=True)
    result = asyncio.run(
        _run_operation("recycle", lambda c: c.recycle_service().recycle_library)
    )
    _report(result)
