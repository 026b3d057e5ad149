"""
Fonctions utilitaires sur les noms et chemins de dossiers.

- sanitize_folder_name : nom de dossier valide sur toutes les plateformes
- is_path_in_directory : test d'appartenance d'un chemin à un répertoire
"""

import re
import unicodedata
from pathlib import Path

from pathvalidate import sanitize_filename

# Ponctuation "sosie" (pleine chasse, guillemets typographiques) -> ASCII
LOOKALIKE_CHARS = {
    "：": ":",  # deux-points pleine chasse
    "﹕": ":",  # petit deux-points
    "꞉": ":",  # lettre modificative deux-points
    "／": "/",
    "∕": "/",  # barre de division
    "＼": "\\",
    "？": "?",
    "＊": "*",
    "＂": '"',
    "’": "'",
    "‘": "'",
    "ʼ": "'",
    "＜": "<",
    "＞": ">",
    "｜": "|",
}

# Entités HTML fréquentes dans les titres renvoyés par l'API
HTML_APOSTROPHES = ("&#39;", "&apos;", "\\u0027")

_ZERO_WIDTH = {"\u200b", "\u200c", "\u200d", "\ufeff"}
_MULTI_SPACES = re.compile(r"\s{2,}")
_MULTI_UNDERSCORES = re.compile(r"_+")


def _strip_invisible(text: str) -> str:
    """Retire les caractères de contrôle, d'usage privé et de largeur nulle."""
    result = []
    for char in text:
        if char in _ZERO_WIDTH:
            continue
        if unicodedata.category(char) in ("Cc", "Co"):
            continue
        result.append(char)
    return "".join(result)


def sanitize_folder_name(name: str) -> str:
    """
    Nettoie une chaîne pour l'utiliser comme nom de dossier.

    Transformations appliquées :
    - Normalisation Unicode NFKC
    - Ponctuation sosie (pleine chasse, guillemets courbes) -> ASCII
    - Entités apostrophe HTML -> '
    - ":" -> " -"
    - Caractères invisibles supprimés
    - Caractères interdits -> "_" (pathvalidate, plateforme universelle)
    - Espaces et underscores multiples réduits
    - Espaces de tête et espaces/points de fin retirés

    Args:
        name: Nom brut

    Returns:
        Nom valide pour un dossier
    """
    if not name:
        return ""

    text = unicodedata.normalize("NFKC", name)
    for char, replacement in LOOKALIKE_CHARS.items():
        text = text.replace(char, replacement)
    for entity in HTML_APOSTROPHES:
        text = text.replace(entity, "'")
    text = text.replace(":", " -")
    text = _strip_invisible(text)

    text = sanitize_filename(text, platform="universal", replacement_text="_")

    text = _MULTI_SPACES.sub(" ", text)
    text = _MULTI_UNDERSCORES.sub("_", text)
    return text.lstrip().rstrip(" .")


def is_path_in_directory(path: Path, directory: Path) -> bool:
    """Indique si `path` est `directory` ou se trouve dessous."""
    try:
        Path(path).resolve().relative_to(Path(directory).resolve())
    except ValueError:
        return False
    return True
