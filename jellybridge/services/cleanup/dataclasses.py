"""
Dataclasses du nettoyage de la bibliotheque placeholder.
"""

from dataclasses import dataclass

from jellybridge.services.results import RunSummary


@dataclass
class CleanupResult(RunSummary):
    """Resultat des passes de nettoyage."""

    # Passe de retention
    items_processed: int = 0
    movies_deleted: int = 0
    shows_deleted: int = 0

    # Passe des dossiers orphelins (NFO sans metadata.json)
    orphans_processed: int = 0
    orphan_movies_deleted: int = 0
    orphan_shows_deleted: int = 0

    # Politique de purge des networks invalides
    invalid_network_purged: int = 0

    # Placeholders recrees
    placeholders_created: int = 0

    @property
    def movies_cleaned(self) -> int:
        return self.movies_deleted + self.orphan_movies_deleted

    @property
    def shows_cleaned(self) -> int:
        return self.shows_deleted + self.orphan_shows_deleted

    @property
    def items_deleted(self) -> int:
        return self.movies_cleaned + self.shows_cleaned + self.invalid_network_purged
