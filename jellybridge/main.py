"""
Point d'entrée CLI de JellyBridge.

Configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import cleanup, recycle, sort, sync
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="jellybridge",
    help="Pont entre la découverte Jellyseerr et une bibliothèque Jellyfin",
)
container = Container()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Logs DEBUG sur la console"),
    ] = False,
) -> None:
    """JellyBridge - Synchronisation de la découverte Jellyseerr."""
    settings = get_config()
    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


# Opérations mutantes (sous verrou)
app.command()(sync)
app.command()(cleanup)
app.command()(sort)
app.command()(recycle)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration JellyBridge")
    typer.echo(f"Jellyseerr : {config.jellyseerr_url}")
    typer.echo(f"Jellyfin : {config.jellyfin_url}")
    typer.echo(f"Bibliothèque : {config.library_directory}")
    typer.echo(f"Dossiers par network : {'oui' if config.network_folders_enabled else 'non'}")
    typer.echo(f"Networks : {', '.join(n.name for n in config.networks) or 'aucun'}")
    typer.echo(f"Rétention : {config.max_retention_days} jours")
    typer.echo(f"Durée placeholder : {config.placeholder_duration_seconds}s")
    ffmpeg_ok = container.placeholder_generator().is_available()
    typer.echo(f"ffmpeg : {config.ffmpeg_path} ({'disponible' if ffmpeg_ok else 'introuvable'})")
    typer.echo(f"Ordre de tri : {config.sort_order.value}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"JellyBridge v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    app()


if __name__ == "__main__":
    main()
