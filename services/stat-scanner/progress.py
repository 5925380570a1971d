"""Progress reporting for a single recognition call.

Wraps the caller's optional callback so that reported percentages never
decrease and 100 is delivered exactly once, by ``complete()``.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """Monotonic, single-subscriber progress channel on a 0-100 scale."""

    def __init__(self, callback: ProgressCallback | None = None):
        self._callback = callback
        self._last = 0.0
        self._completed = False

    @property
    def last(self) -> float:
        return self._last

    @property
    def completed(self) -> bool:
        return self._completed

    def update(self, percent: float) -> None:
        """Report intermediate progress. Values are capped below 100."""
        if self._completed:
            return
        percent = min(max(float(percent), 0.0), 99.0)
        if percent <= self._last:
            return
        self._last = percent
        if self._callback is not None:
            self._callback(percent)

    def complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        self._last = 100.0
        if self._callback is not None:
            self._callback(100.0)
