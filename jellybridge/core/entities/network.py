"""
Entité Network : un fournisseur (bucket de curation) du catalogue distant.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Network:
    """
    Fournisseur de contenu interrogé lors de la découverte.

    Attributs :
        name : Nom affiche (ex: "Netflix"), sert de tag et de sous-dossier
        id : Identifiant numérique du watch provider TMDB
        country : Région de diffusion (code ISO, ex: "US"), None = région configurée
        priority : Priorité d'affichage renvoyée par Jellyseerr
    """

    name: str
    id: int
    country: Optional[str] = None
    priority: int = 0
