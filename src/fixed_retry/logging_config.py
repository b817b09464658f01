"""Logging setup utilities."""

from __future__ import annotations

import logging
import sys


def configure_logging(log_level: str = "WARNING") -> None:
    level = getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
