"""One-callback-per-frame scheduling, driven by the front end's main loop."""

from __future__ import annotations

import itertools
from typing import Callable, Protocol

StepCallback = Callable[[float], None]


class Scheduler(Protocol):
    def request_step(self, callback: StepCallback) -> int: ...
    def cancel_step(self, token: int) -> None: ...


class FrameScheduler:
    """Holds callbacks until the next `pump`. Callbacks requested during a
    pump run on the following frame, never the current one."""

    def __init__(self):
        self._tokens = itertools.count(1)
        self._pending: dict[int, StepCallback] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_step(self, callback: StepCallback) -> int:
        token = next(self._tokens)
        self._pending[token] = callback
        return token

    def cancel_step(self, token: int) -> None:
        self._pending.pop(token, None)

    def cancel_all(self) -> None:
        self._pending.clear()

    def pump(self, timestamp_ms: float) -> int:
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback(timestamp_ms)
        return len(due)
