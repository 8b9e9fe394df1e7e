"""Audio subsystem adapters.

The spatial driver talks to an `AudioBackend`. `PygameMixerBackend` plays
through pygame.mixer channels; `SilentAudioBackend` keeps the same voice
bookkeeping without producing sound (headless runs, --no-audio).
"""

from __future__ import annotations

import io
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import pygame

logger = logging.getLogger(__name__)


class AssetDecodeError(RuntimeError):
    """The car sound could not be loaded or decoded."""


class AudioSubsystemUnavailable(RuntimeError):
    """The mixer is closed, uninitialised, or out of channels."""


class AudioBackend(Protocol):
    def load_decoded_asset(self, data: bytes) -> Any: ...
    def create_voice(self, buffer: Any) -> Any: ...
    def set_gain(self, voice: Any, gain: float) -> None: ...
    def set_pan(self, voice: Any, pan: int) -> None: ...
    def start(self, voice: Any) -> None: ...
    def stop(self, voice: Any) -> None: ...
    def release(self, voice: Any) -> None: ...
    def close(self) -> None: ...


@dataclass
class Voice:
    """One playback instance. Parameter calls after release are ignored."""
    token: int
    sound: Any = None
    channel: Any = None
    gain: float = 0.0
    pan: int = 0
    playing: bool = False
    released: bool = False


def _stereo_volume(gain: float, pan: int) -> tuple[float, float]:
    if pan < 0:
        return gain, 0.0
    if pan > 0:
        return 0.0, gain
    return gain, gain


class PygameMixerBackend:
    """pygame.mixer adapter. Each voice owns one mixer channel."""

    def __init__(self, frequency: int = 44100, buffer: int = 512, voices: int = 16):
        self.frequency = frequency
        self.buffer = buffer
        self.voices = voices
        self._tokens = itertools.count(1)
        self._owned_mixer = False

    def open(self) -> None:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self.frequency, size=-16, channels=2, buffer=self.buffer)
                self._owned_mixer = True
            pygame.mixer.set_num_channels(max(self.voices, int(pygame.mixer.get_num_channels())))
        except pygame.error as exc:
            raise AudioSubsystemUnavailable(f"mixer init failed: {exc}") from exc

    @staticmethod
    def _ready() -> bool:
        return pygame.mixer.get_init() is not None

    def load_decoded_asset(self, data: bytes):
        if not self._ready():
            raise AudioSubsystemUnavailable("mixer is not initialised")
        try:
            return pygame.mixer.Sound(file=io.BytesIO(data))
        except (pygame.error, ValueError) as exc:
            raise AssetDecodeError(f"cannot decode car sound: {exc}") from exc

    def create_voice(self, buffer) -> Voice:
        if not self._ready():
            raise AudioSubsystemUnavailable("mixer is not initialised")
        channel = pygame.mixer.find_channel()
        if channel is None:
            raise AudioSubsystemUnavailable("no free mixer channel")
        return Voice(next(self._tokens), sound=buffer, channel=channel)

    def _apply(self, voice: Voice) -> None:
        if voice.playing and self._ready():
            try:
                voice.channel.set_volume(*_stereo_volume(voice.gain, voice.pan))
            except pygame.error as exc:
                raise AudioSubsystemUnavailable(str(exc)) from exc

    def set_gain(self, voice: Voice, gain: float) -> None:
        if voice.released:
            return
        voice.gain = gain
        self._apply(voice)

    def set_pan(self, voice: Voice, pan: int) -> None:
        if voice.released:
            return
        voice.pan = pan
        self._apply(voice)

    def start(self, voice: Voice) -> None:
        if voice.released or voice.playing or not self._ready():
            return
        try:
            voice.channel.play(voice.sound, loops=-1)
        except pygame.error as exc:
            raise AudioSubsystemUnavailable(str(exc)) from exc
        voice.playing = True
        # play() resets the channel volume
        self._apply(voice)

    def stop(self, voice: Voice) -> None:
        if voice.released or not voice.playing:
            return
        voice.playing = False
        if self._ready():
            try:
                voice.channel.stop()
            except pygame.error as exc:
                raise AudioSubsystemUnavailable(str(exc)) from exc

    def release(self, voice: Voice) -> None:
        if voice.released:
            return
        self.stop(voice)
        voice.released = True
        voice.channel = None
        voice.sound = None

    def close(self) -> None:
        if self._owned_mixer and self._ready():
            pygame.mixer.quit()
        self._owned_mixer = False


class SilentAudioBackend:
    """Accepts every call and plays nothing."""

    def __init__(self):
        self._tokens = itertools.count(1)
        self.closed = False

    def load_decoded_asset(self, data: bytes):
        if not data:
            raise AssetDecodeError("empty sound asset")
        return data

    def create_voice(self, buffer) -> Voice:
        if self.closed:
            raise AudioSubsystemUnavailable("backend closed")
        return Voice(next(self._tokens), sound=buffer)

    def set_gain(self, voice: Voice, gain: float) -> None:
        if not voice.released:
            voice.gain = gain

    def set_pan(self, voice: Voice, pan: int) -> None:
        if not voice.released:
            voice.pan = pan

    def start(self, voice: Voice) -> None:
        if not voice.released:
            voice.playing = True

    def stop(self, voice: Voice) -> None:
        if not voice.released:
            voice.playing = False

    def release(self, voice: Voice) -> None:
        voice.playing = False
        voice.released = True

    def close(self) -> None:
        self.closed = True
