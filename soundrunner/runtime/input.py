"""Keyboard -> intent mapping. Works on key names so it needs no pygame."""

from __future__ import annotations

from game_engine import GameStatus
from soundrunner.core.contracts import Intent


class TripleTapDetector:
    """Counts taps that each land within `window_ms` of the previous one."""

    def __init__(self, window_ms: float = 500.0, taps: int = 3):
        self.window_ms = window_ms
        self.taps = taps
        self.count = 0
        self._last: float | None = None

    def tap(self, now_ms: float) -> bool:
        """Register a tap; True on the tap that completes the sequence."""
        if self._last is None or now_ms - self._last > self.window_ms:
            self.count = 1
        else:
            self.count += 1
        self._last = now_ms
        if self.count >= self.taps:
            self.count = 0
            return True
        return False

    def reset(self) -> None:
        self.count = 0
        self._last = None


class InputArbiter:
    """Space switches lanes; triple Space or P pauses/resumes; Enter starts."""

    def __init__(self, engine, *, tap_window_ms: float = 500.0, taps: int = 3):
        self.engine = engine
        self.taps = TripleTapDetector(tap_window_ms, taps)

    def intents_for(self, key: str, now_ms: float, status: GameStatus) -> list[Intent]:
        key = key.lower()
        if key in ("return", "enter"):
            if status is GameStatus.IDLE:
                return [Intent.START]
            if status is GameStatus.GAME_OVER:
                return [Intent.RESTART]
            return []
        if status not in (GameStatus.RUNNING, GameStatus.PAUSED):
            return []
        if key == "space":
            intents = [Intent.SWITCH_LANE] if status is GameStatus.RUNNING else []
            if self.taps.tap(now_ms):
                intents.append(Intent.TOGGLE_PAUSE)
            return intents
        if key == "p":
            return [Intent.TOGGLE_PAUSE]
        return []

    def key_pressed(self, key: str, now_ms: float) -> list[Intent]:
        """Map one key press and apply the resulting intents in order."""
        intents = self.intents_for(key, now_ms, self.engine.snapshot.status)
        for intent in intents:
            self.engine.handle_intent(intent)
        return intents
