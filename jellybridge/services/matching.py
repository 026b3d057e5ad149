"""
Moteur de correspondance entre dossiers placeholder et vraie bibliothèque.

match_library_items est une fonction pure : pour chaque item réel, le
premier placeholder dont matches_library_item() est vrai forme une paire
et n'est plus reconsidéré. Les items réels situés dans la bibliothèque
placeholder elle-même sont ignorés.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from jellybridge.core.entities import LibraryItem, MediaKind
from jellybridge.core.errors import IncompatibleLibraryError
from jellybridge.core.ports.library import ILibraryGateway
from jellybridge.services.metadata_store import StoredItem
from jellybridge.utils.folders import is_path_in_directory


@dataclass(eq=False)
class LibraryMatch:
    """Paire (dossier placeholder, item réel)."""

    placeholder: StoredItem
    library_item: LibraryItem


@dataclass
class MatchResult:
    """Partition des placeholders en trouvés / non trouvés."""

    matched: list[LibraryMatch] = field(default_factory=list)
    unmatched: list[StoredItem] = field(default_factory=list)


def match_library_items(
    library_items: list[LibraryItem],
    placeholders: list[StoredItem],
    library_directory: Optional[Path] = None,
) -> MatchResult:
    """
    Partitionne les placeholders selon leur présence dans la vraie bibliothèque.

    Args:
        library_items: Items de la vraie bibliothèque
        placeholders: Dossiers placeholder relus du disque
        library_directory: Racine placeholder (items réels dessous ignorés)

    Returns:
        MatchResult avec les paires et les placeholders restants (ordre conservé)
    """
    remaining = list(placeholders)
    matched: list[LibraryMatch] = []

    for real_item in library_items:
        if (
            library_directory is not None
            and real_item.path is not None
            and is_path_in_directory(real_item.path, library_directory)
        ):
            continue
        for index, stored in enumerate(remaining):
            if stored.item.matches_library_item(real_item):
                matched.append(LibraryMatch(placeholder=stored, library_item=real_item))
                del remaining[index]
                break

    return MatchResult(matched=matched, unmatched=remaining)


class LibraryMatcher:
    """Énumère la vraie bibliothèque puis applique match_library_items."""

    def __init__(self, library: ILibraryGateway, library_directory: Path) -> None:
        self._library = library
        self._library_directory = Path(library_directory)

    async def find_matches(self, placeholders: list[StoredItem]) -> MatchResult:
        """
        Cherche les placeholders déjà présents dans la vraie bibliothèque.

        Une réponse incompatible du serveur dégrade l'étape en "aucune
        correspondance" au lieu d'interrompre la synchronisation.
        """
        library_items: list[LibraryItem] = []
        try:
            for kind in (MediaKind.MOVIE, MediaKind.SHOW):
                library_items.extend(await self._library.get_items(kind))
        except IncompatibleLibraryError as e:
            logger.warning(f"Bibliothèque incompatible, aucune correspondance calculée : {e}")
            return MatchResult(matched=[], unmatched=list(placeholders))

        result = match_library_items(library_items, placeholders, self._library_directory)
        logger.info(
            f"Correspondance : {len(result.matched)} trouve(s), "
            f"{len(result.unmatched)} absent(s) de la bibliothèque"
        )
        return result
