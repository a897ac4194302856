"""Identifier generation for tasks and subtasks."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class MonotonicIdGenerator:
    """Time-based integer ids that never repeat.

    Each id is the current epoch milliseconds, bumped past the previous id
    when two ids are requested within the same clock tick or the clock steps
    backwards.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms, floor: int = 0):
        self._clock = clock
        self._last = floor

    def observe(self, existing: Iterable[int]) -> None:
        """Make sure future ids are greater than every id in *existing*."""
        for value in existing:
            if value > self._last:
                self._last = value

    def next_id(self) -> int:
        candidate = self._clock()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate
