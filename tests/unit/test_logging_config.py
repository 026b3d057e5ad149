"""
Tests pour la configuration loguru.
"""

import json

from loguru import logger

from jellybridge.logging_config import NO_OPERATION, configure_logging


class TestConfigureLogging:
    """Tests pour configure_logging()."""

    def test_file_sink_records_operation(self, tmp_path) -> None:
        """Le fichier JSON porte le nom de l'opération en cours."""
        log_file = tmp_path / "logs" / "jellybridge.log"
        configure_logging(log_level="WARNING", log_file=log_file)

        logger.info("hors opération")
        with logger.contextualize(operation="sync"):
            logger.debug("dans la sync")
        logger.remove()

        records = [
            json.loads(line)["record"]
            for line in log_file.read_text(encoding="utf-8").splitlines()
        ]
        by_message = {record["message"]: record["extra"] for record in records}
        assert by_message["hors opération"]["operation"] == NO_OPERATION
        assert by_message["dans la sync"]["operation"] == "sync"
