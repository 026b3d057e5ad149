"""
Entités du catalogue distant Jellyseerr.

Un CatalogItem représente un film ou une série remonté par la découverte.
Les deux variantes exposent une identité explicite : identity_key (id, type
de média) pour le dédoublonnage, matches_library_item pour la bibliothèque.
L'égalité par défaut des dataclasses est désactivée car les items sont
construits par des chemins différents (payload API, metadata.json).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional
from xml.etree import ElementTree as ET

if TYPE_CHECKING:
    from .library import LibraryItem


class MediaKind(str, Enum):
    """Type de média tel que nommé par Jellyseerr."""

    MOVIE = "movie"
    SHOW = "tv"


@dataclass(eq=False)
class CatalogItem(ABC):
    """
    Item du catalogue (film ou série).

    Attributs :
        id : Identifiant TMDB de l'item
        name : Titre affiche
        date : Date de sortie / première diffusion (AAAA-MM-JJ)
        overview : Synopsis
        poster_path : Chemin du poster TMDB
        imdb_id : Identifiant IMDb (films)
        tvdb_id : Identifiant TVDB (séries)
        network_tag : Nom du network source
        network_id : Identifiant du network source
        created_date : Date de dernière écriture du dossier
    """

    id: int
    name: str = ""
    date: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    imdb_id: Optional[str] = None
    tvdb_id: Optional[int] = None
    network_tag: Optional[str] = None
    network_id: Optional[int] = None
    created_date: Optional[datetime] = None

    kind: ClassVar[MediaKind]
    nfo_filename: ClassVar[str]
    nfo_root: ClassVar[str]
    name_key: ClassVar[str]
    date_key: ClassVar[str]

    @property
    def year(self) -> Optional[int]:
        """Année extraite de la date, None si absente ou invalide."""
        if not self.date or len(self.date) < 4 or not self.date[:4].isdigit():
            return None
        return int(self.date[:4])

    def identity_key(self) -> tuple[int, MediaKind]:
        """Clé composite utilisée pour le dédoublonnage."""
        return (self.id, self.kind)

    @abstractmethod
    def matches_library_item(self, item: "LibraryItem") -> bool:
        """Indique si un item de la vraie bibliothèque correspond à cet item."""

    def folder_name(self) -> str:
        """Nom de dossier brut (avant nettoyage) : "Titre (Année) [tmdbid-ID]"."""
        parts = [self.name or str(self.id)]
        if self.year is not None:
            parts.append(f"({self.year})")
        parts.append(f"[tmdbid-{self.id}]")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Sérialise l'item au format de metadata.json."""
        return {
            "id": self.id,
            "mediaType": self.kind.value,
            self.name_key: self.name,
            self.date_key: self.date,
            "overview": self.overview,
            "posterPath": self.poster_path,
            "imdbId": self.imdb_id,
            "tvdbId": self.tvdb_id,
            "networkTag": self.network_tag,
            "networkId": self.network_id,
            "createdDate": self.created_date.isoformat() if self.created_date else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogItem":
        """
        Construit un item depuis un payload API ou un metadata.json.

        Raises:
            KeyError: Si l'identifiant est absent
            ValueError: Si un champ numérique ou une date est invalide
        """
        media_info = data.get("mediaInfo") or {}
        tvdb_id = data.get("tvdbId") or media_info.get("tvdbId")
        network_id = data.get("networkId")
        created = data.get("createdDate")
        return cls(
            id=int(data["id"]),
            name=data.get(cls.name_key) or data.get("title") or data.get("name") or "",
            date=data.get(cls.date_key) or data.get("releaseDate") or data.get("firstAirDate"),
            overview=data.get("overview"),
            poster_path=data.get("posterPath"),
            imdb_id=data.get("imdbId") or media_info.get("imdbId"),
            tvdb_id=int(tvdb_id) if tvdb_id else None,
            network_tag=data.get("networkTag"),
            network_id=int(network_id) if network_id is not None else None,
            created_date=_parse_created_date(created),
        )

    def to_nfo(self) -> str:
        """Génère le contenu XML du descripteur (movie.nfo / tvshow.nfo)."""
        root = ET.Element(self.nfo_root)
        ET.SubElement(root, "title").text = self.name
        if self.year is not None:
            ET.SubElement(root, "year").text = str(self.year)
        if self.overview:
            ET.SubElement(root, "plot").text = self.overview
        tmdb = ET.SubElement(root, "uniqueid", type="tmdb", default="true")
        tmdb.text = str(self.id)
        ET.SubElement(root, "tmdbid").text = str(self.id)
        for element in self._extra_nfo_ids():
            root.append(element)
        if self.network_tag:
            ET.SubElement(root, "tag").text = self.network_tag
        ET.indent(root)
        body = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0" encoding="utf-8" standalone="yes"?>\n{body}\n'

    def _extra_nfo_ids(self) -> list[ET.Element]:
        return []


@dataclass(eq=False)
class MovieItem(CatalogItem):
    """Film du catalogue."""

    kind: ClassVar[MediaKind] = MediaKind.MOVIE
    nfo_filename: ClassVar[str] = "movie.nfo"
    nfo_root: ClassVar[str] = "movie"
    name_key: ClassVar[str] = "title"
    date_key: ClassVar[str] = "releaseDate"

    def matches_library_item(self, item: "LibraryItem") -> bool:
        """Correspondance par identifiant TMDB, puis IMDb."""
        if item.kind != MediaKind.MOVIE:
            return False
        if item.provider_id("Tmdb") == str(self.id):
            return True
        return bool(self.imdb_id) and item.provider_id("Imdb") == self.imdb_id

    def _extra_nfo_ids(self) -> list[ET.Element]:
        if not self.imdb_id:
            return []
        unique = ET.Element("uniqueid", type="imdb")
        unique.text = self.imdb_id
        imdb = ET.Element("imdbid")
        imdb.text = self.imdb_id
        return [unique, imdb]


@dataclass(eq=False)
class ShowItem(CatalogItem):
    """Série du catalogue."""

    kind: ClassVar[MediaKind] = MediaKind.SHOW
    nfo_filename: ClassVar[str] = "tvshow.nfo"
    nfo_root: ClassVar[str] = "tvshow"
    name_key: ClassVar[str] = "name"
    date_key: ClassVar[str] = "firstAirDate"

    def matches_library_item(self, item: "LibraryItem") -> bool:
        """Correspondance par identifiant TMDB, puis TVDB."""
        if item.kind != MediaKind.SHOW:
            return False
        if item.provider_id("Tmdb") == str(self.id):
            return True
        return self.tvdb_id is not None and item.provider_id("Tvdb") == str(self.tvdb_id)

    def _extra_nfo_ids(self) -> list[ET.Element]:
        if self.tvdb_id is None:
            return []
        unique = ET.Element("uniqueid", type="tvdb")
        unique.text = str(self.tvdb_id)
        tvdb = ET.Element("tvdbid")
        tvdb.text = str(self.tvdb_id)
        return [unique, tvdb]


def _parse_created_date(value: Optional[str]) -> Optional[datetime]:
    """Parse une date ISO ; une date sans fuseau est considérée en UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


_ITEM_CLASSES: dict[MediaKind, type[CatalogItem]] = {
    MediaKind.MOVIE: MovieItem,
    MediaKind.SHOW: ShowItem,
}


def item_class_for(kind: MediaKind) -> type[CatalogItem]:
    """Retourne la classe d'item associée à un type de média."""
    return _ITEM_CLASSES[kind]


def catalog_item_from_dict(data: dict[str, Any]) -> CatalogItem:
    """
    Construit un MovieItem ou ShowItem selon le champ mediaType.

    Raises:
        ValueError: Si le mediaType est inconnu
    """
    kind = MediaKind(data.get("mediaType"))
    return _ITEM_CLASSES[kind].from_dict(data)
