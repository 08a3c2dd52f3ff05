"""Shared CLI helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Plain messages at INFO; timestamps, levels and logger names at DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT,
        force=True,
    )
    # requests/urllib3 connection chatter is noise at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
