"""Logging configuration for the bees CLI."""
from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure the ``bees`` logger once per process.

    Level: BEES_LOG_LEVEL if set, else DEBUG with ``--verbose``, else WARNING.
    Logs go to stderr so they never interleave with the size report.
    """
    level_name = os.environ.get("BEES_LOG_LEVEL")
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    root = logging.getLogger("bees")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.propagate = False
