from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from game_engine import Tuning


class ConfigError(ValueError):
    """Raised when settings cannot produce a correct game."""


@dataclass(frozen=True)
class AudioSettings:
    car_sound: Path | None
    lead_distance: float
    fade_distance: float
    gain_floor: float
    gain_high: float
    activation_start: float
    activation_end: float

    mixer_frequency: int = 44100
    mixer_buffer: int = 512
    mixer_voices: int = 16


@dataclass(frozen=True)
class SpeechSettings:
    enabled: bool
    rate: int
    freeze_timeout_s: float
    max_queue: int
    max_utterance_s: float


@dataclass(frozen=True)
class InputSettings:
    pause_tap_window_ms: float
    pause_tap_count: int


@dataclass(frozen=True)
class Settings:
    tuning: Tuning
    audio: AudioSettings
    speech: SpeechSettings
    input: InputSettings
    seed: int | None = None

    def with_overrides(self, **kwargs) -> "Settings":
        return replace(self, **kwargs)

    @property
    def audio_peak(self) -> float:
        return self.tuning.hit_line - self.audio.lead_distance

    def validate(self) -> "Settings":
        t = self.tuning
        for name in ("speed_range", "spawn_interval_ms", "first_spawn_ms"):
            lo, hi = getattr(t, name)
            if not 0 < lo <= hi:
                raise ConfigError(f"{name} must satisfy 0 < low <= high, got {(lo, hi)}")
        if t.max_delta_ms <= 0 or t.reference_frame_ms <= 0:
            raise ConfigError("max_delta_ms and reference_frame_ms must be positive")
        if t.margin <= t.max_tick_displacement:
            raise ConfigError(
                f"collision margin {t.margin} must exceed the largest per-tick "
                f"displacement {t.max_tick_displacement:.1f}"
            )
        if not t.start_position < t.hit_line - t.margin < t.hit_line < t.field_length:
            raise ConfigError("expected start_position < hit window < field_length")
        if t.milestone_every <= 0:
            raise ConfigError("milestone_every must be positive")

        a = self.audio
        if not 0.0 <= a.gain_floor <= a.gain_high <= 1.0:
            raise ConfigError(f"gain bounds must satisfy 0 <= floor <= high <= 1, got {(a.gain_floor, a.gain_high)}")
        if a.fade_distance <= 0:
            raise ConfigError("fade_distance must be positive")
        if a.activation_start >= a.activation_end:
            raise ConfigError("audio activation window is empty")

        if self.speech.freeze_timeout_s <= 0:
            raise ConfigError("freeze_timeout_s must be positive")
        if self.input.pause_tap_count < 1:
            raise ConfigError("pause_tap_count must be >= 1")
        return self
