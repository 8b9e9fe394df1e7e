"""Generated fallback car sound, used when no asset file is shipped."""

from __future__ import annotations

import io
import wave

import numpy as np

SAMPLE_RATE = 22050


def engine_hum_pcm(duration_s: float = 1.0, *, base_hz: float = 82.0, gain: float = 0.45,
                   seed: int = 0xCA4, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Low sawtooth with a little rumble. Whole cycles only, so it loops cleanly."""
    cycles = max(1, round(base_hz * duration_s))
    n = max(1, int(round(cycles * sample_rate / base_hz)))
    t = np.arange(n) / sample_rate
    phase = (t * base_hz) % 1.0
    saw = 2.0 * phase - 1.0
    harmonic = 0.35 * np.sin(2 * np.pi * base_hz * 2 * t)
    rng = np.random.default_rng(seed)
    rumble = np.convolve(rng.uniform(-1.0, 1.0, n), np.ones(32) / 32, mode="same")
    signal = 0.6 * saw + harmonic + 0.4 * rumble
    peak = float(np.max(np.abs(signal))) or 1.0
    return (signal / peak * gain * 32767).astype(np.int16)


def engine_hum_wav(duration_s: float = 1.0, **kwargs) -> bytes:
    """WAV-encoded engine hum, mono 16-bit."""
    sample_rate = kwargs.get("sample_rate", SAMPLE_RATE)
    pcm = engine_hum_pcm(duration_s, **kwargs)
    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())
    return out.getvalue()
