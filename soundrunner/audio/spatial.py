"""Per-obstacle stereo voices whose gain follows obstacle position."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from game_engine import Obstacle
from soundrunner.audio.backend import AudioBackend, AudioSubsystemUnavailable
from soundrunner.config.schema import AudioSettings

logger = logging.getLogger(__name__)


def gain_for_position(position: float, peak: float, fade_distance: float,
                      gain_floor: float, gain_high: float) -> float:
    """Louder as the car nears `peak`, clamped to the audible range."""
    distance = abs(position - peak)
    gain = 1.0 - distance / fade_distance
    return max(gain_floor, min(gain_high, gain))


class SpatialAudioDriver:
    """Owns the obstacle-id -> voice table.

    Every backend call goes through `_guard`, so a closed or broken mixer
    turns into silence instead of an exception in the tick.
    """

    def __init__(self, backend: AudioBackend, settings: AudioSettings, peak: float):
        self.backend = backend
        self.settings = settings
        self.peak = peak
        self.buffer: Any = None
        self._voices: dict[str, Any] = {}
        self.released_count = 0

    @property
    def has_sound(self) -> bool:
        return self.buffer is not None

    @property
    def voice_ids(self) -> set[str]:
        return set(self._voices)

    def voice_for(self, obstacle_id: str):
        return self._voices.get(obstacle_id)

    def load_asset(self, data: bytes) -> None:
        """Decode the car loop. Raises AssetDecodeError / AudioSubsystemUnavailable."""
        self.buffer = self.backend.load_decoded_asset(data)

    def gain_for(self, position: float) -> float:
        s = self.settings
        return gain_for_position(position, self.peak, s.fade_distance, s.gain_floor, s.gain_high)

    def in_window(self, position: float) -> bool:
        return self.settings.activation_start <= position <= self.settings.activation_end

    def _guard(self, op: str, fn, *args) -> bool:
        try:
            fn(*args)
        except AudioSubsystemUnavailable as exc:
            logger.debug("audio %s failed: %s", op, exc)
            return False
        return True

    def attach(self, obstacle: Obstacle) -> bool:
        """Best-effort voice for one obstacle. False leaves it silent."""
        if self.buffer is None or obstacle.id in self._voices or not self.in_window(obstacle.position):
            return False
        try:
            voice = self.backend.create_voice(self.buffer)
        except AudioSubsystemUnavailable as exc:
            logger.debug("no voice for %s: %s", obstacle.id, exc)
            return False
        self._voices[obstacle.id] = voice
        ok = (
            self._guard("pan", self.backend.set_pan, voice, obstacle.lane.pan)
            and self._guard("gain", self.backend.set_gain, voice, self.gain_for(obstacle.position))
            and self._guard("start", self.backend.start, voice)
        )
        if not ok:
            self.release(obstacle.id)
        return ok

    def sync(self, obstacles: Iterable[Obstacle]) -> None:
        """Bring voices in line with obstacle positions after a tick."""
        seen = set()
        for o in obstacles:
            seen.add(o.id)
            if not self.in_window(o.position):
                self.release(o.id)
            elif o.id in self._voices:
                if not self._guard("gain", self.backend.set_gain, self._voices[o.id], self.gain_for(o.position)):
                    self.release(o.id)
            else:
                self.attach(o)
        for stale in [i for i in self._voices if i not in seen]:
            self.release(stale)

    def mute_all(self) -> None:
        for voice in self._voices.values():
            self._guard("gain", self.backend.set_gain, voice, 0.0)

    def release(self, obstacle_id: str) -> None:
        voice = self._voices.pop(obstacle_id, None)
        if voice is None:
            return
        self._guard("stop", self.backend.stop, voice)
        self._guard("release", self.backend.release, voice)
        self.released_count += 1

    def release_all(self) -> None:
        for obstacle_id in list(self._voices):
            self.release(obstacle_id)

    def close(self) -> None:
        self.release_all()
        self._guard("close", self.backend.close)
