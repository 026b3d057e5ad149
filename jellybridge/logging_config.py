"""
Configuration du logging de l'application via loguru.

Deux sorties :
- console : lisible, colorée, préfixée par l'opération en cours (sync, cleanup...)
- fichier : JSON avec rotation, au niveau DEBUG pour garder le détail par item

Le nom de l'opération est porté par le contexte loguru (champ extra "operation")
et positionné par OperationRunner pendant toute la durée d'une opération.
"""

import sys
from pathlib import Path

from loguru import logger

# Valeur du champ "operation" hors de toute opération
NO_OPERATION = "-"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[operation]: <8}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/jellybridge.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Installe les sorties console et fichier.

    Args :
        log_level : Niveau minimum de la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier JSON (le répertoire parent est créé)
        rotation_size : Taille déclenchant la rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs conservés
    """
    logger.remove()
    logger.configure(extra={"operation": NO_OPERATION})

    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=CONSOLE_FORMAT,
        colorize=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,  # Thread-safe (copies de placeholders dans l'executor)
    )

    logger.debug(f"Logging configuré : {log_file} (rotation {rotation_size})")
