"""
Fonctions d'execution des suppressions du nettoyage.

Chaque fonction traite une liste de dossiers, journalise les echecs
individuels dans result.errors et poursuit avec les suivants.
"""

import shutil
from pathlib import Path

from loguru import logger

from .dataclasses import CleanupResult


def delete_folder(directory: Path, result: CleanupResult) -> bool:
    """
    Supprime recursivement un dossier placeholder.

    Returns:
        True si le dossier a ete supprime
    """
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        return False
    except OSError as e:
        message = f"Suppression echouee {directory}: {e}"
        logger.error(message)
        result.errors.append(message)
        return False
    logger.debug(f"Dossier supprime : {directory}")
    return True
