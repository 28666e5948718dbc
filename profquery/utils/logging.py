"""
Structured logging setup.

Usage:
    from profquery.utils.logging import get_logger
    logger = get_logger("profquery.pipeline.retrieval")
    logger.info("[RETRIEVAL] Routed %d doc(s)", len(doc_ids))
"""

from __future__ import annotations

import logging
import sys


_handler: logging.Handler | None = None


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    return level


def setup_logging(level: int | str | None = None) -> None:
    """
    Configure the ``profquery`` logger tree.

    The handler is attached once per process.  A later call with an
    explicit ``level`` (e.g. from Settings at app startup) re-applies it.
    """
    global _handler
    root = logging.getLogger("profquery")

    if _handler is not None:
        if level is not None:
            resolved = _resolve_level(level)
            root.setLevel(resolved)
            _handler.setLevel(resolved)
        return

    resolved = _resolve_level(logging.INFO if level is None else level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root.setLevel(resolved)
    root.addHandler(handler)
    root.propagate = False

    _handler = handler


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``profquery`` namespace.

    Automatically calls ``setup_logging()`` on first use to ensure
    the root handler is attached.
    """
    setup_logging()
    return logging.getLogger(name)
