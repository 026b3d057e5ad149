"""
Stockage des dossiers placeholder sur disque.

Chaque item du catalogue est représenté par un dossier :
    <bibliothèque>/[<préfixe><network>/]<Titre (Année) [tmdbid-ID]>/
        metadata.json   (item sérialisé, réécrit à chaque synchronisation)
        movie.nfo       (ou tvshow.nfo, écrit une seule fois)
        .ignore         (optionnel, item déjà présent dans la vraie bibliothèque)

Un dossier n'est valide que si metadata.json et le NFO du bon type existent.
"""

import json
import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional
from xml.etree import ElementTree as ET

from loguru import logger

from jellybridge.core.entities import CatalogItem, MovieItem, ShowItem
from jellybridge.core.errors import LibraryDirectoryError
from jellybridge.utils.folders import sanitize_folder_name

METADATA_FILENAME = "metadata.json"
IGNORE_FILENAME = ".ignore"
DATE_ADDED_FORMAT = "%Y-%m-%d %H:%M:%S"
_DATE_ADDED_PATTERN = re.compile(r"<dateadded\s*/>|<dateadded>.*?</dateadded>", re.DOTALL)

# Descripteur -> classe d'item, dans l'ordre de détection
_DESCRIPTORS: tuple[tuple[str, type[CatalogItem]], ...] = (
    (MovieItem.nfo_filename, MovieItem),
    (ShowItem.nfo_filename, ShowItem),
)


@dataclass(eq=False)
class StoredItem:
    """Item relu depuis un dossier placeholder."""

    directory: Path
    item: CatalogItem

    @property
    def ignore_path(self) -> Path:
        return self.directory / IGNORE_FILENAME

    @property
    def ignored(self) -> bool:
        return self.ignore_path.exists()


class FolderMetadataStore:
    """
    Lecture/écriture des dossiers placeholder.

    Example:
        store = FolderMetadataStore(Path("/data/JellyBridge"))
        added, updated = store.write_items(items)
        for stored in store.read_items():
            print(stored.directory, stored.item.name)
    """

    def __init__(
        self,
        library_directory: Path,
        network_folders: bool = False,
        library_prefix: str = "",
    ) -> None:
        """
        Args:
            library_directory: Racine de la bibliothèque placeholder
            network_folders: Range les items par sous-dossier de network
            library_prefix: Préfixe des sous-dossiers de network
        """
        self._root = Path(library_directory)
        self._network_folders = network_folders
        self._prefix = library_prefix

    @property
    def library_directory(self) -> Path:
        return self._root

    def ensure_library_directory(self) -> None:
        """
        Vérifie que la racine existe et est un répertoire.

        Raises:
            LibraryDirectoryError: Si la racine est absente
        """
        if not self._root.is_dir():
            raise LibraryDirectoryError(f"Répertoire de bibliothèque absent : {self._root}")

    def network_directory(self, network_tag: str) -> Path:
        """Sous-dossier d'un network (préfixe inclus)."""
        return self._root / sanitize_folder_name(f"{self._prefix}{network_tag}")

    def item_directory(self, item: CatalogItem) -> Path:
        """Chemin déterministe du dossier d'un item."""
        base = self._root
        if self._network_folders and item.network_tag:
            base = self.network_directory(item.network_tag)
        return base / sanitize_folder_name(item.folder_name())

    # ------------------------------------------------------------------
    # Écriture
    # ------------------------------------------------------------------

    def write_item(self, item: CatalogItem, now: Optional[datetime] = None) -> bool:
        """
        Écrit ou rafraîchit le dossier d'un item.

        - metadata.json est toujours réécrit (created_date = maintenant)
        - le NFO n'est écrit que s'il est absent (préserve les éditions manuelles)
        - la date d'ajout du NFO est toujours repatchée

        Returns:
            True si le dossier vient d'être créé, False s'il existait déjà
        """
        now = now or datetime.now(timezone.utc)
        directory = self.item_directory(item)
        existed = directory.is_dir()
        directory.mkdir(parents=True, exist_ok=True)

        item.created_date = now
        metadata_path = directory / METADATA_FILENAME
        metadata_path.write_text(
            json.dumps(item.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )

        nfo_path = directory / item.nfo_filename
        if not nfo_path.exists():
            nfo_path.write_text(item.to_nfo(), encoding="utf-8")
        self.patch_date_added(nfo_path)

        return not existed

    def write_items(self, items: list[CatalogItem]) -> tuple[list[CatalogItem], list[CatalogItem]]:
        """
        Écrit les dossiers d'une liste d'items.

        Returns:
            Tuple (items ajoutés, items mis à jour)
        """
        added: list[CatalogItem] = []
        updated: list[CatalogItem] = []
        for item in items:
            if self.write_item(item):
                added.append(item)
            else:
                updated.append(item)
        logger.info(f"Métadonnées écrites : {len(added)} ajouté(s), {len(updated)} mis à jour")
        return added, updated

    def patch_date_added(self, nfo_path: Path) -> bool:
        """
        Remplace <dateadded> par un instant aléatoire des dernières 24h.

        Seul le texte de cet élément est réécrit, le reste du fichier (édition
        manuelle comprise) est conservé à l'octet près. Un NFO illisible est
        laissé tel quel.

        Returns:
            True si le NFO a été modifié
        """
        date_added = datetime.now() - timedelta(seconds=random.uniform(0, 86400))
        content = nfo_path.read_text(encoding="utf-8")
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            logger.warning(f"NFO illisible, dateadded non modifiée : {nfo_path} ({e})")
            return False

        element = f"<dateadded>{date_added.strftime(DATE_ADDED_FORMAT)}</dateadded>"
        if _DATE_ADDED_PATTERN.search(content):
            content = _DATE_ADDED_PATTERN.sub(element, content, count=1)
        else:
            closing = content.rfind(f"</{root.tag}>")
            if closing == -1:
                logger.warning(f"NFO sans balise fermante, dateadded non ajoutée : {nfo_path}")
                return False
            content = f"{content[:closing]}  {element}\n{content[closing:]}"

        nfo_path.write_text(content, encoding="utf-8")
        return True

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def read_items(self) -> list[StoredItem]:
        """
        Relit tous les dossiers placeholder.

        Le type est déterminé par le NFO présent à côté de metadata.json ;
        les dossiers sans NFO reconnu ou au JSON invalide sont ignorés.
        """
        if not self._root.is_dir():
            return []

        stored: list[StoredItem] = []
        for metadata_path in sorted(self._root.rglob(METADATA_FILENAME)):
            directory = metadata_path.parent
            item_class = _detect_item_class(directory)
            if item_class is None:
                logger.warning(f"metadata.json sans NFO reconnu, ignore : {directory}")
                continue
            try:
                data = json.loads(metadata_path.read_text(encoding="utf-8"))
                item = item_class.from_dict(data)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"metadata.json illisible : {metadata_path} ({e})")
                continue
            stored.append(StoredItem(directory=directory, item=item))
        return stored

    def find_descriptor_directories(self) -> list[tuple[Path, type[CatalogItem]]]:
        """Liste les dossiers contenant un NFO de film ou de série."""
        if not self._root.is_dir():
            return []
        found: dict[Path, type[CatalogItem]] = {}
        for filename, item_class in _DESCRIPTORS:
            for nfo_path in self._root.rglob(filename):
                found.setdefault(nfo_path.parent, item_class)
        return sorted(found.items(), key=lambda entry: str(entry[0]))

    # ------------------------------------------------------------------
    # Marqueurs .ignore
    # ------------------------------------------------------------------

    def write_ignore(self, directory: Path, payload: Optional[dict[str, Any]] = None) -> bool:
        """
        Crée le marqueur .ignore d'un dossier (contenu indicatif).

        Returns:
            False si le marqueur existait déjà
        """
        ignore_path = directory / IGNORE_FILENAME
        if ignore_path.exists():
            return False
        body = json.dumps(payload, indent=2, ensure_ascii=False) if payload else ""
        ignore_path.write_text(body, encoding="utf-8")
        return True

    def delete_ignore_files(self) -> int:
        """Supprime tous les marqueurs .ignore de la bibliothèque."""
        if not self._root.is_dir():
            return 0
        count = 0
        for ignore_path in self._root.rglob(IGNORE_FILENAME):
            ignore_path.unlink()
            count += 1
        if count:
            logger.info(f"{count} marqueur(s) .ignore supprimé(s)")
        return count


def _detect_item_class(directory: Path) -> Optional[type[CatalogItem]]:
    for filename, item_class in _DESCRIPTORS:
        if (directory / filename).exists():
            return item_class
    return None
