"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe JELLYBRIDGE_,
et peut optionnellement être fournie via un fichier .env.

Les surcharges provenant d'une source externe (JSON de configuration) passent par la
table explicite SETTINGS_OVERRIDES : seules les clés listées sont reconnues.
"""

import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Callable, NamedTuple, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jellybridge.core.entities import Network

# Trouver le fichier .env à la racine du projet (parent de jellybridge/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class SortOrder(str, Enum):
    """Algorithme d'ordonnancement des items de la bibliothèque."""

    NONE = "none"
    RANDOM = "random"
    SMART = "smart"


DEFAULT_NETWORKS: tuple[Network, ...] = (
    Network(name="Netflix", id=8, priority=4),
    Network(name="Disney Plus", id=337, priority=1),
    Network(name="Amazon Prime Video", id=9, priority=3),
    Network(name="Apple TV+", id=350, priority=8),
    Network(name="Hulu", id=15, priority=7),
    Network(name="HBO Max", id=49, priority=27),
    Network(name="Paramount Plus", id=531, priority=6),
)


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe JELLYBRIDGE_.
    Exemple : JELLYBRIDGE_LOG_LEVEL=DEBUG
    La liste des networks se fournit en JSON :
    JELLYBRIDGE_NETWORKS='[{"name": "Netflix", "id": 8, "country": "FR"}]'

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="JELLYBRIDGE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Jellyseerr
    jellyseerr_url: str = Field(default="http://localhost:5055")
    api_key: str = Field(default="")

    # Jellyfin
    jellyfin_url: str = Field(default="http://localhost:8096")
    jellyfin_api_key: str = Field(default="")

    # Bibliothèque
    library_directory: Path = Field(default=Path("/data/JellyBridge"))
    exclude_from_main_libraries: bool = Field(default=True)
    create_separate_libraries: bool = Field(default=False)
    use_network_folders: bool = Field(default=False)
    library_prefix: str = Field(default="")
    add_duplicate_content: bool = Field(default=False)

    # Découverte
    region: str = Field(default="US")  # Pays des networks sans "country"
    networks: list[Network] = Field(default_factory=lambda: list(DEFAULT_NETWORKS))
    max_discover_pages: int = Field(default=1, ge=0)
    request_timeout: int = Field(default=60, ge=1)
    retry_attempts: int = Field(default=3, ge=1)

    # Rétention et nettoyage
    max_retention_days: int = Field(default=30, ge=1)
    purge_invalid_network_after_days: Optional[int] = Field(default=None, ge=1)

    # Vidéos placeholder
    placeholder_duration_seconds: int = Field(default=10, ge=1)
    ffmpeg_path: str = Field(default="ffmpeg")
    cache_directory: Path = Field(default=Path(tempfile.gettempdir()) / "JellyBridge")

    # Opérations
    task_timeout_minutes: int = Field(default=10, ge=1)
    sort_order: SortOrder = Field(default=SortOrder.NONE)
    mark_media_played: bool = Field(default=False)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/jellybridge.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("library_directory", "cache_directory", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def network_folders_enabled(self) -> bool:
        """Vérifie si les items sont rangés par sous-dossier de network."""
        return self.use_network_folders or self.create_separate_libraries

    @property
    def configured_network_ids(self) -> set[int]:
        """Identifiants des networks actuellement configurés."""
        return {network.id for network in self.networks}

    @property
    def task_timeout_seconds(self) -> float:
        """Délai d'attente du verrou d'opération en secondes."""
        return self.task_timeout_minutes * 60.0


class SettingOverride(NamedTuple):
    """Ligne de la table des surcharges : clé externe, champ, parseur."""

    key: str
    field: str
    parser: Callable[[Any], Any]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _parse_networks(value: Any) -> list[Network]:
    return [
        Network(
            name=str(raw["name"]),
            id=int(raw["id"]),
            country=raw.get("country") or None,
            priority=int(raw.get("displayPriority", raw.get("priority", 0)) or 0),
        )
        for raw in value
    ]


def _parse_optional_int(value: Any) -> Optional[int]:
    return None if value in (None, "") else int(value)


SETTINGS_OVERRIDES: tuple[SettingOverride, ...] = (
    SettingOverride("jellyseerrUrl", "jellyseerr_url", str),
    SettingOverride("apiKey", "api_key", str),
    SettingOverride("libraryDirectory", "library_directory", Path),
    SettingOverride("excludeFromMainLibraries", "exclude_from_main_libraries", _parse_bool),
    SettingOverride("createSeparateLibraries", "create_separate_libraries", _parse_bool),
    SettingOverride("useNetworkFolders", "use_network_folders", _parse_bool),
    SettingOverride("libraryPrefix", "library_prefix", str),
    SettingOverride("addDuplicateContent", "add_duplicate_content", _parse_bool),
    SettingOverride("region", "region", str),
    SettingOverride("networkMap", "networks", _parse_networks),
    SettingOverride("maxDiscoverPages", "max_discover_pages", int),
    SettingOverride("requestTimeout", "request_timeout", int),
    SettingOverride("retryAttempts", "retry_attempts", int),
    SettingOverride("maxRetentionDays", "max_retention_days", int),
    SettingOverride(
        "purgeInvalidNetworkAfterDays", "purge_invalid_network_after_days", _parse_optional_int
    ),
    SettingOverride("placeholderDurationSeconds", "placeholder_duration_seconds", int),
    SettingOverride("taskTimeoutMinutes", "task_timeout_minutes", int),
    SettingOverride("sortOrder", "sort_order", lambda v: SortOrder(str(v).lower())),
    SettingOverride("markMediaPlayed", "mark_media_played", _parse_bool),
)


def apply_overrides(settings: Settings, data: dict[str, Any]) -> tuple[Settings, list[str]]:
    """
    Applique des surcharges externes à une configuration.

    Seules les clés de SETTINGS_OVERRIDES sont reconnues ; les autres sont
    retournées pour être signalées. Le résultat est revalidé par pydantic.

    Args:
        settings: Configuration de départ
        data: Dictionnaire clé externe -> valeur

    Returns:
        Tuple (nouvelle configuration, clés inconnues)

    Raises:
        pydantic.ValidationError: Si une valeur est invalide pour son champ
        ValueError: Si un parseur refuse une valeur
    """
    table = {row.key: row for row in SETTINGS_OVERRIDES}
    values = settings.model_dump()
    unknown: list[str] = []
    for key, value in data.items():
        row = table.get(key)
        if row is None:
            unknown.append(key)
            continue
        values[row.field] = row.parser(value)
    return Settings.model_validate(values), unknown
