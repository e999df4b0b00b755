"""
Structured logging setup.

Usage:
    from reposcout.utils.logging import get_logger
    logger = get_logger("reposcout.pipeline.scout")
    logger.info("[SCOUT] %d candidates", len(candidates))
"""

from __future__ import annotations

import logging
import sys


_configured = False


def setup_logging(level: int = logging.INFO) -> None:
    """Configure structured logging for the entire application."""
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger("reposcout")
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``reposcout`` namespace.

    Automatically calls ``setup_logging()`` on first use to ensure
    the root handler is attached.
    """
    setup_logging()
    return logging.getLogger(name)
