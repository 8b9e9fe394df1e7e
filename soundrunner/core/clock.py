"""Turns a free-running millisecond clock into bounded per-tick deltas."""

from __future__ import annotations

import time

from game_engine import MAX_DELTA_MS


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Stepper:
    def __init__(self, max_delta_ms: float = MAX_DELTA_MS):
        self.max_delta_ms = max_delta_ms
        self._last: float | None = None

    def reset(self, now_ms: float) -> None:
        """Forget elapsed wall time, e.g. after a pause."""
        self._last = now_ms

    def step(self, now_ms: float) -> float:
        if self._last is None:
            self._last = now_ms
        delta = min(max(now_ms - self._last, 0.0), self.max_delta_ms)
        self._last = now_ms
        return delta
