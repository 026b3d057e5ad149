"""
Génération des vidéos placeholder.

Une image fixe embarquée est bouclée par ffmpeg pendant la durée configurée
pour produire une courte vidéo H.264. Le rendu est mis en cache par
(type, durée) puis copié dans chaque dossier placeholder.

Deux niveaux de verrous par clé évitent le travail en double :
- extraction de l'image : un verrou par nom d'asset
- rendu : un verrou par chemin de cache
N demandes concurrentes pour la même clé donnent un seul appel à ffmpeg.

Exemple d'utilisation:
    generator = PlaceholderVideoGenerator(cache_directory=Path("/tmp/JellyBridge"))
    await generator.generate(PlaceholderKind.MOVIE, folder)
"""

import asyncio
import os
import shutil
import uuid
from enum import Enum
from functools import partial
from importlib import resources
from pathlib import Path
from typing import Optional

from loguru import logger

from jellybridge.utils.keyed_lock import KeyedLock

PLACEHOLDER_EXTENSION = ".mp4"
SEASON_FOLDER = "Season 00"


class PlaceholderKind(str, Enum):
    """Type de placeholder (détermine l'image source et le nom de la vidéo)."""

    MOVIE = "movie"
    SEASON = "season"


# Type -> (image source, chemin de la vidéo relatif au dossier de l'item)
_TARGETS: dict[PlaceholderKind, tuple[str, Path]] = {
    PlaceholderKind.MOVIE: ("movie.png", Path("movie.mp4")),
    PlaceholderKind.SEASON: ("season.png", Path(SEASON_FOLDER) / "S00E00.mp4"),
}


class PlaceholderVideoGenerator:
    """
    Produit et copie les vidéos placeholder.

    Toute erreur (ffmpeg absent ou en échec, copie impossible) est journalisée
    et se traduit par un retour False : l'appelant continue son lot.
    """

    def __init__(
        self,
        cache_directory: Path,
        duration_seconds: int = 10,
        ffmpeg_path: str = "ffmpeg",
        encoder_timeout: float = 120.0,
        poll_attempts: int = 5,
        poll_base_delay: float = 1.0,
    ) -> None:
        """
        Args:
            cache_directory: Répertoire de travail (images extraites et rendus)
            duration_seconds: Durée des vidéos placeholder
            ffmpeg_path: Executable ffmpeg
            encoder_timeout: Durée maximale d'un rendu en secondes
            poll_attempts: Nombre de vérifications du fichier en cache
            poll_base_delay: Premier délai d'attente (double à chaque tentative)
        """
        self._assets_dir = Path(cache_directory) / "assets"
        self._cache_dir = Path(cache_directory) / "placeholders"
        self._duration = duration_seconds
        self._ffmpeg_path = ffmpeg_path
        self._encoder_timeout = encoder_timeout
        self._poll_attempts = poll_attempts
        self._poll_base_delay = poll_base_delay
        self._asset_locks = KeyedLock()
        self._render_locks = KeyedLock()

    def is_available(self) -> bool:
        """Vérifie la présence de ffmpeg."""
        return shutil.which(self._ffmpeg_path) is not None

    def cache_path(self, kind: PlaceholderKind) -> Path:
        """Chemin du rendu en cache pour un type et la durée configurée."""
        return self._cache_dir / f"{kind.value}_{self._duration}{PLACEHOLDER_EXTENSION}"

    @staticmethod
    def target_path(folder: Path, kind: PlaceholderKind) -> Path:
        """Chemin canonique de la vidéo placeholder dans un dossier d'item."""
        return folder / _TARGETS[kind][1]

    @classmethod
    def has_placeholder(cls, folder: Path, kind: PlaceholderKind) -> bool:
        """Indique si le dossier contient déjà sa vidéo placeholder."""
        target = cls.target_path(folder, kind)
        return target.is_file() and target.stat().st_size > 0

    async def extract_asset(self, kind: PlaceholderKind) -> Optional[Path]:
        """
        Copie l'image embarquée dans le répertoire de travail.

        Returns:
            Chemin de l'image extraite, ou None en cas d'échec
        """
        asset_name = _TARGETS[kind][0]
        destination = self._assets_dir / asset_name
        async with self._asset_locks.acquire(asset_name):
            if _is_ready(destination):
                return destination
            try:
                data = resources.files("jellybridge.assets").joinpath(asset_name).read_bytes()
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, partial(_write_atomic, destination, data))
            except OSError as e:
                logger.error(f"Extraction de l'image {asset_name} impossible : {e}")
                return None
        logger.debug(f"Image placeholder extraite : {destination}")
        return destination

    async def ensure_cached(self, kind: PlaceholderKind) -> Optional[Path]:
        """
        Retourne le rendu en cache, le produit si nécessaire.

        Returns:
            Chemin du fichier en cache prêt à être copié, ou None
        """
        cache_path = self.cache_path(kind)
        async with self._render_locks.acquire(str(cache_path)):
            if not _is_ready(cache_path):
                asset = await self.extract_asset(kind)
                if asset is None:
                    return None
                if not await self._render(asset, cache_path):
                    return None

        if not await self._wait_until_ready(cache_path):
            logger.warning(f"Rendu en cache indisponible : {cache_path}")
            return None
        return cache_path

    async def generate(self, kind: PlaceholderKind, folder: Path) -> bool:
        """
        Place la vidéo placeholder d'un type dans un dossier d'item.

        Les autres vidéos placeholder du dossier cible sont supprimées pour
        n'en conserver qu'une.

        Returns:
            True si la vidéo a été copiée
        """
        cached = await self.ensure_cached(kind)
        if cached is None:
            return False

        target = self.target_path(folder, kind)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(_copy_and_prune, cached, target))
        except OSError as e:
            logger.error(f"Copie du placeholder impossible vers {target} : {e}")
            return False
        logger.debug(f"Placeholder {kind.value} créé : {target}")
        return True

    async def _render(self, asset: Path, cache_path: Path) -> bool:
        """Boucle l'image avec ffmpeg et publie le résultat dans le cache."""
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = cache_path.with_name(
            f"{cache_path.stem}.{uuid.uuid4().hex}.partial{PLACEHOLDER_EXTENSION}"
        )
        cmd = [
            self._ffmpeg_path,
            "-y",
            "-loglevel", "error",
            "-loop", "1",
            "-i", str(asset),
            "-t", str(self._duration),
            "-vf", "scale=1280:720,format=yuv420p",
            "-c:v", "libx264",
            "-pix_fmt", "yuv420p",
            "-movflags", "+faststart",
            str(partial_path),
        ]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _, stderr = await asyncio.wait_for(
                    process.communicate(), timeout=self._encoder_timeout
                )
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
                logger.warning(f"Timeout ffmpeg ({self._encoder_timeout}s) pour {cache_path.name}")
                return False

            if process.returncode != 0:
                logger.warning(f"ffmpeg erreur ({process.returncode}): {stderr.decode(errors='replace')}")
                return False
            if not _is_ready(partial_path):
                logger.warning(f"ffmpeg n'a produit aucune sortie pour {cache_path.name}")
                return False

            os.replace(partial_path, cache_path)
        except OSError as e:
            logger.error(f"Rendu placeholder impossible ({self._ffmpeg_path}) : {e}")
            return False
        finally:
            partial_path.unlink(missing_ok=True)

        logger.info(f"Placeholder rendu en cache : {cache_path}")
        return True

    async def _wait_until_ready(self, path: Path) -> bool:
        """Attend que le fichier soit complet (backoff 1s, 2s, 4s...)."""
        for attempt in range(self._poll_attempts):
            if _is_ready(path):
                return True
            delay = self._poll_base_delay * (2 ** attempt)
            logger.debug(f"Fichier {path.name} pas encore prêt, nouvelle vérification dans {delay}s")
            await asyncio.sleep(delay)
        return _is_ready(path)


def _is_ready(path: Path) -> bool:
    """Fichier présent, non vide et ouvrable en écriture."""
    try:
        if not path.is_file() or path.stat().st_size == 0:
            return False
        with open(path, "r+b"):
            pass
    except OSError:
        return False
    return True


def _write_atomic(destination: Path, data: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    temp = destination.with_name(f"{destination.name}.{uuid.uuid4().hex}.tmp")
    temp.write_bytes(data)
    os.replace(temp, destination)


def _copy_and_prune(source: Path, target: Path) -> None:
    """Copie la vidéo et supprime les autres placeholders du dossier cible."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    for other in target.parent.glob(f"*{PLACEHOLDER_EXTENSION}"):
        if other != target and other.is_file():
            other.unlink()
