from __future__ import annotations

from pathlib import Path

import config as legacy_config
from game_engine import Tuning

from .schema import AudioSettings, InputSettings, Settings, SpeechSettings


def from_legacy_config() -> Settings:
    tuning = Tuning(
        field_length=float(legacy_config.GAME_HEIGHT),
        hit_line=float(legacy_config.PLAYER_Y_POSITION),
        start_position=float(legacy_config.CAR_START_Y),
        margin=float(legacy_config.COLLISION_MARGIN),
        reference_frame_ms=float(legacy_config.REFERENCE_FRAME_MS),
        max_delta_ms=float(legacy_config.MAX_DELTA_MS),
        speed_range=(float(legacy_config.MIN_CAR_SPEED), float(legacy_config.MAX_CAR_SPEED)),
        spawn_interval_ms=tuple(legacy_config.SPAWN_INTERVAL_MS),
        first_spawn_ms=tuple(legacy_config.FIRST_SPAWN_MS),
        milestone_every=int(legacy_config.MILESTONE_EVERY),
    )
    car_sound = getattr(legacy_config, "CAR_SOUND", None)
    audio = AudioSettings(
        car_sound=Path(car_sound) if car_sound is not None else None,
        lead_distance=float(legacy_config.AUDIO_LEAD_DISTANCE),
        fade_distance=float(legacy_config.AUDIO_FADE_DISTANCE),
        gain_floor=float(legacy_config.AUDIO_GAIN_FLOOR),
        gain_high=float(legacy_config.AUDIO_GAIN_HIGH),
        activation_start=float(legacy_config.AUDIO_ACTIVATION_START),
        activation_end=float(legacy_config.AUDIO_ACTIVATION_END),
        mixer_frequency=int(getattr(legacy_config, "MIXER_FREQUENCY", 44100)),
        mixer_buffer=int(getattr(legacy_config, "MIXER_BUFFER", 512)),
        mixer_voices=int(getattr(legacy_config, "MIXER_VOICES", 16)),
    )
    speech = SpeechSettings(
        enabled=bool(getattr(legacy_config, "SPEECH_ENABLED", True)),
        rate=int(getattr(legacy_config, "SPEECH_RATE", 176)),
        freeze_timeout_s=float(getattr(legacy_config, "SPEECH_FREEZE_TIMEOUT_S", 4.0)),
        max_queue=int(getattr(legacy_config, "SPEECH_MAX_QUEUE", 8)),
        max_utterance_s=float(getattr(legacy_config, "SPEECH_MAX_UTTERANCE_S", 12.0)),
    )
    controls = InputSettings(
        pause_tap_window_ms=float(getattr(legacy_config, "PAUSE_TAP_WINDOW_MS", 500)),
        pause_tap_count=int(getattr(legacy_config, "PAUSE_TAP_COUNT", 3)),
    )
    return Settings(
        tuning=tuning,
        audio=audio,
        speech=speech,
        input=controls,
        seed=getattr(legacy_config, "SEED", None),
    )
