"""File logging for the mb_rcon package, driven by RconConfig."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mb_rcon.config import RconConfig

PACKAGE_LOGGER = "mb_rcon"

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(cfg: RconConfig) -> RotatingFileHandler | None:
    """Attach a rotating file handler for cfg.log_path to the package logger.

    Does nothing when no log path is configured. Calling it again for a path
    that already has a handler only updates the level.

    Returns:
        The handler writing to cfg.log_path, or None if file logging is off.

    """
    if cfg.log_path is None:
        return None
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(cfg.log_level)

    existing = _find_handler(package_logger, cfg.log_path)
    if existing is not None:
        return existing

    cfg.log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(cfg.log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    package_logger.addHandler(handler)
    return handler


def _find_handler(package_logger: logging.Logger, log_path: Path) -> RotatingFileHandler | None:
    target = os.path.abspath(log_path)
    for handler in package_logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
            return handler
    return None
