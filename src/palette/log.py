"""Logging setup shared by the CLI and the service."""
from __future__ import annotations

import logging

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(threadName)s] %(filename)s:%(lineno)d %(message)s"
DATE_FORMAT = "%H:%M:%S"


def level_for_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.INFO
    if verbosity == 1:
        return logging.DEBUG
    return TRACE


def setup_logging(verbosity: int = 0) -> None:
    logging.basicConfig(level=level_for_verbosity(verbosity), format=LOG_FORMAT, datefmt=DATE_FORMAT, force=True)


__all__ = ["TRACE", "level_for_verbosity", "setup_logging"]
