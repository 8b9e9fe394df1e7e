"""Spatial audio: mixer adapters, per-obstacle voices, generated car sound."""

from .backend import (
    AssetDecodeError,
    AudioBackend,
    AudioSubsystemUnavailable,
    PygameMixerBackend,
    SilentAudioBackend,
    Voice,
)
from .spatial import SpatialAudioDriver, gain_for_position
from .synth import engine_hum_wav

__all__ = [
    "AssetDecodeError",
    "AudioBackend",
    "AudioSubsystemUnavailable",
    "PygameMixerBackend",
    "SilentAudioBackend",
    "SpatialAudioDriver",
    "Voice",
    "engine_hum_wav",
    "gain_for_position",
]
