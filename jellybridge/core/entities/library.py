"""
Entités de la vraie bibliothèque (serveur Jellyfin).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .catalog import MediaKind


@dataclass
class LibraryUser:
    """Utilisateur du serveur de bibliothèque."""

    id: str
    name: str = ""


@dataclass
class LibraryItem:
    """
    Item réel (film ou série) présent dans la bibliothèque.

    Attributs :
        id : Identifiant de l'item côté serveur
        name : Nom affiche
        kind : Type de média
        path : Chemin sur disque (fichier pour un film, dossier pour une série)
        provider_ids : Identifiants externes ("Tmdb", "Imdb", "Tvdb")
        year : Année de production
    """

    id: str
    name: str
    kind: MediaKind
    path: Optional[Path] = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    year: Optional[int] = None

    def provider_id(self, provider: str) -> Optional[str]:
        """Retourne l'identifiant externe, recherche insensible à la casse."""
        wanted = provider.lower()
        for key, value in self.provider_ids.items():
            if key.lower() == wanted and value:
                return str(value)
        return None

    @property
    def directory(self) -> Optional[Path]:
        """Dossier de l'item (le parent du fichier pour un film)."""
        if self.path is None:
            return None
        if self.kind == MediaKind.MOVIE and self.path.suffix:
            return self.path.parent
        return self.path

    def to_dict(self) -> dict[str, Any]:
        """Sérialise l'item pour le fichier .ignore."""
        return {
            "Id": self.id,
            "Name": self.name,
            "Type": "Movie" if self.kind == MediaKind.MOVIE else "Series",
            "ProductionYear": self.year,
            "Path": str(self.path) if self.path else None,
            "ProviderIds": dict(self.provider_ids),
        }
