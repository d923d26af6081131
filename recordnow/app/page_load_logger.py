from __future__ import annotations

import logging
import os
import time

logger = logging.getLogger(__name__)

PAGE_LOGGING_ENABLED = os.getenv("RECORDNOW_DETAILED_PAGE_LOGGING", "0") not in (
    "0",
    "false",
    "False",
    "",
    None,
)


class PageLoadLogger:
    """Lightweight timing helper for document load + segmentation + render steps."""

    def __init__(self, path: str) -> None:
        self.path = path
        now = time.perf_counter()
        self._start = now
        self._last = now
        self.enabled = PAGE_LOGGING_ENABLED
        if self.enabled:
            logger.info("[PageLoad] start doc=%s", path)

    def mark(self, label: str) -> None:
        if not self.enabled:
            return
        now = time.perf_counter()
        step_ms = (now - self._last) * 1000.0
        total_ms = (now - self._start) * 1000.0
        logger.info("[PageLoad] %s +%.1fms total=%.1fms doc=%s", label, step_ms, total_ms, self.path)
        self._last = now

    def end(self, label: str = "ready") -> None:
        self.mark(label)
