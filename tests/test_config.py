"""Tests for soundrunner.config — legacy defaults, overrides, validation."""

import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

import config
from soundrunner.config.loader import load_settings
from soundrunner.config.schema import ConfigError


class TestSettings:
    def test_defaults_mirror_legacy_config(self):
        s = load_settings()
        assert s.tuning.hit_line == config.PLAYER_Y_POSITION
        assert s.tuning.margin == config.COLLISION_MARGIN
        assert s.tuning.speed_range == (config.MIN_CAR_SPEED, config.MAX_CAR_SPEED)
        assert s.audio.gain_high == config.AUDIO_GAIN_HIGH
        assert s.audio_peak == config.PLAYER_Y_POSITION - config.AUDIO_LEAD_DISTANCE
        assert s.input.pause_tap_count == 3

    def test_overrides(self, tmp_path):
        sound = tmp_path / "car.wav"
        s = load_settings(seed=5, car_sound=sound, speech_enabled=False)
        assert s.seed == 5
        assert s.audio.car_sound == sound
        assert s.speech.enabled is False

    def test_margin_must_beat_max_displacement(self):
        s = load_settings()
        bad = s.with_overrides(tuning=replace(s.tuning, margin=30))
        with pytest.raises(ConfigError, match="margin"):
            bad.validate()

    def test_faster_cars_need_wider_margin(self):
        s = load_settings()
        fast = s.with_overrides(tuning=replace(s.tuning, speed_range=(4.0, 9.0)))
        with pytest.raises(ConfigError):
            fast.validate()

    def test_empty_spawn_range_rejected(self):
        s = load_settings()
        bad = s.with_overrides(tuning=replace(s.tuning, spawn_interval_ms=(4000.0, 1500.0)))
        with pytest.raises(ConfigError, match="spawn_interval_ms"):
            bad.validate()

    def test_gain_bounds_checked(self):
        s = load_settings()
        bad = s.with_overrides(audio=replace(s.audio, gain_floor=0.8))
        with pytest.raises(ConfigError, match="gain"):
            bad.validate()
