from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from .defaults import from_legacy_config
from .schema import Settings


def load_settings(
    *,
    seed: int | None = None,
    car_sound: str | Path | None = None,
    speech_enabled: bool | None = None,
) -> Settings:
    """Load runtime settings, defaulting to values from the legacy config module."""
    settings = from_legacy_config()
    if seed is not None:
        settings = settings.with_overrides(seed=seed)
    if car_sound is not None:
        settings = settings.with_overrides(audio=replace(settings.audio, car_sound=Path(car_sound)))
    if speech_enabled is not None:
        settings = settings.with_overrides(speech=replace(settings.speech, enabled=speech_enabled))
    return settings.validate()
