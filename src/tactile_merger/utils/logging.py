"""Logging configuration helpers."""

from __future__ import annotations

import logging

MERGER_LOGGER = "tactile_merger.merger"


def configure_logging(level: int = logging.INFO, *, merger_level: int | None = None) -> None:
    """Configure the global logging output format and default level.

    ``merger_level`` sets a separate level for the merger loggers, which warn
    once per rejected update and can flood the output with a faulty sensor.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if merger_level is not None:
        logging.getLogger(MERGER_LOGGER).setLevel(merger_level)
