"""Narration channel with two priorities and a world freeze tied to speech."""

from __future__ import annotations

import enum
import logging
import time
from collections import deque
from typing import Callable

from soundrunner.speech.backend import Completion, SpeechBackend, SpeechUnavailable

logger = logging.getLogger(__name__)


class Priority(enum.Enum):
    HIGH = "high"   # cancel whatever is speaking, speak now
    LOW = "low"     # queue behind the current utterance


class Utterance:
    def __init__(self, text: str, priority: Priority):
        self.text = text
        self.priority = priority
        self.completion: Completion | None = None
        self.launched = False

    def done(self) -> bool:
        return self.launched and (self.completion is None or self.completion.done())

    def __repr__(self) -> str:
        return f"Utterance({self.text!r}, {self.priority.value})"


class Announcer:
    """Speaks status lines; optionally holds the world still until one finishes.

    Only one freeze is outstanding. Asking for another while frozen moves the
    release point to the newer utterance. A freeze never lasts longer than
    `freeze_timeout_s`, so a speech engine that never reports completion
    cannot stall the game.
    """

    def __init__(self, backend: SpeechBackend, *, freeze_timeout_s: float = 4.0, max_queue: int = 8,
                 clock: Callable[[], float] = time.monotonic):
        self.backend = backend
        self.freeze_timeout_s = freeze_timeout_s
        self.max_queue = max_queue
        self._clock = clock
        self._pending: deque[Utterance] = deque()
        self._active: Utterance | None = None
        self._freeze_on: Utterance | None = None
        self._freeze_deadline = 0.0

    @property
    def frozen(self) -> bool:
        return self._freeze_on is not None

    @property
    def busy(self) -> bool:
        return self._active is not None or bool(self._pending)

    def say(self, text: str, priority: Priority = Priority.LOW, *, freeze: bool = False) -> Utterance:
        utterance = Utterance(text, priority)
        if freeze:
            self._freeze_on = utterance
            self._freeze_deadline = self._clock() + self.freeze_timeout_s
        if priority is Priority.HIGH:
            self._drop_pending()
            self._launch(utterance, cancel_previous=True)
        else:
            self._pending.append(utterance)
            while len(self._pending) > self.max_queue:
                self._drop(self._pending.popleft())
            self._pump()
        return utterance

    def update(self) -> None:
        """Poll completions; start the next queued line; end a finished freeze."""
        self._pump()
        target = self._freeze_on
        if target is not None and (target.done() or self._clock() >= self._freeze_deadline):
            if not target.done():
                logger.warning("announcement %r overran %.1fs; unfreezing", target.text, self.freeze_timeout_s)
            self._freeze_on = None

    def cancel_all(self) -> None:
        self._drop_pending()
        self._active = None
        self._freeze_on = None
        try:
            self.backend.cancel_all()
        except SpeechUnavailable:
            pass

    def _pump(self) -> None:
        if self._active is not None and not self._active.done():
            return
        self._active = None
        while self._pending:
            utterance = self._pending.popleft()
            self._launch(utterance, cancel_previous=False)
            if not utterance.done():
                return

    def _launch(self, utterance: Utterance, *, cancel_previous: bool) -> None:
        try:
            utterance.completion = self.backend.speak(utterance.text, cancel_previous=cancel_previous)
        except SpeechUnavailable as exc:
            logger.debug("speech unavailable, skipping %r: %s", utterance.text, exc)
            utterance.completion = None
        utterance.launched = True
        self._active = utterance if not utterance.done() else None

    def _drop(self, utterance: Utterance) -> None:
        if utterance is self._freeze_on:
            self._freeze_on = None

    def _drop_pending(self) -> None:
        while self._pending:
            self._drop(self._pending.popleft())
