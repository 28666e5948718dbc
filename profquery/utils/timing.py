"""
Stage timer used by the orchestrator.

Usage:
    timings: dict[str, float] = {}
    async with Timer("retrieve", sink=timings) as t:
        result = await retrieve(...)
    logger.info("took %.1fms", t.elapsed_ms)
"""

from __future__ import annotations

import time
from typing import Any

from profquery.utils.logging import get_logger

logger = get_logger("profquery.timing")


class Timer:
    """Context-manager timer (sync + async) that can record into a dict."""

    def __init__(self, label: str = "", sink: dict[str, float] | None = None):
        self.label = label
        self.sink = sink
        self._start: float = 0.0
        self.elapsed_s: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_s * 1000

    def _stop(self) -> None:
        self.elapsed_s = time.perf_counter() - self._start
        if self.sink is not None and self.label:
            self.sink[self.label] = round(self.elapsed_s, 4)
        if self.label:
            logger.debug("%s completed in %.1fms", self.label, self.elapsed_ms)

    # Sync
    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: Any) -> None:
        self._stop()

    # Async
    async def __aenter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self._stop()
