"""Tests for logging setup."""

import logging
from pathlib import Path

from mb_rcon.config import RconConfig
from mb_rcon.log import setup_logging


def _flush(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


class TestSetupLogging:
    """setup_logging driven by RconConfig."""

    def test_disabled_without_path(self, package_logger: logging.Logger):
        """No log_path attaches nothing."""
        assert setup_logging(RconConfig()) is None
        assert package_logger.handlers == []

    def test_writes_to_file(self, tmp_path: Path, package_logger: logging.Logger):
        """Messages from package modules reach the log file; missing directories are created."""
        log_path = tmp_path / "logs" / "rcon.log"
        setup_logging(RconConfig(log_path=log_path))
        logging.getLogger("mb_rcon.connection").info("hello from rcon")
        _flush(package_logger)
        assert "hello from rcon" in log_path.read_text()

    def test_level_filters_debug(self, tmp_path: Path, package_logger: logging.Logger):
        """Debug traffic is dropped at the default INFO level and kept at DEBUG."""
        log_path = tmp_path / "rcon.log"
        setup_logging(RconConfig(log_path=log_path))
        logging.getLogger("mb_rcon.connection").debug("packet id=1")
        _flush(package_logger)
        assert "packet id=1" not in log_path.read_text()

        setup_logging(RconConfig(log_path=log_path, log_level="DEBUG"))
        logging.getLogger("mb_rcon.connection").debug("packet id=2")
        _flush(package_logger)
        assert "packet id=2" in log_path.read_text()

    def test_idempotent_per_path(self, tmp_path: Path, package_logger: logging.Logger):
        """The same path gets one handler; another path gets its own."""
        first = setup_logging(RconConfig(log_path=tmp_path / "rcon.log"))
        assert setup_logging(RconConfig(log_path=tmp_path / "rcon.log")) is first
        setup_logging(RconConfig(log_path=tmp_path / "other.log"))
        assert len(package_logger.handlers) == 2
