#!/usr/bin/env python3
"""
SOUND RUNNER — audio-first two-lane dodge game
Listen for cars in your left or right ear and switch lanes before they hit.

Requirements:
    pip install pygame pyttsx3 numpy
"""

from __future__ import annotations

import argparse
import logging
import sys

import pygame

from game_engine import FPS, GameStatus
from soundrunner.audio.backend import AudioSubsystemUnavailable, PygameMixerBackend, SilentAudioBackend
from soundrunner.audio.synth import engine_hum_wav
from soundrunner.config.loader import load_settings
from soundrunner.config.schema import Settings
from soundrunner.core.engine import SoundRunnerEngine
from soundrunner.runtime.input import InputArbiter
from soundrunner.runtime.scheduler import FrameScheduler
from soundrunner.speech.backend import SilentSpeech, SubprocessSpeech

logger = logging.getLogger("sound_runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sound Runner")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--asset", default=None, help="Looping car sound (wav/ogg)")
    parser.add_argument("--no-speech", action="store_true", help="Disable spoken announcements")
    parser.add_argument("--no-audio", action="store_true", help="Run without the mixer")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def pygame_ms() -> float:
    """Same time base as the timestamps handed to scheduled steps."""
    return float(pygame.time.get_ticks())


def read_car_sound(settings: Settings) -> bytes:
    path = settings.audio.car_sound
    if path is not None and path.exists():
        return path.read_bytes()
    logger.info("no car sound at %s, generating one", path)
    return engine_hum_wav()


def build_engine(settings: Settings, scheduler: FrameScheduler, *, audio_enabled: bool = True) -> SoundRunnerEngine:
    audio = SilentAudioBackend()
    if audio_enabled:
        mixer = PygameMixerBackend(
            frequency=settings.audio.mixer_frequency,
            buffer=settings.audio.mixer_buffer,
            voices=settings.audio.mixer_voices,
        )
        try:
            mixer.open()
            audio = mixer
        except AudioSubsystemUnavailable as exc:
            logger.warning("audio disabled: %s", exc)

    if settings.speech.enabled:
        speech = SubprocessSpeech(rate=settings.speech.rate, max_utterance_s=settings.speech.max_utterance_s)
        if speech.backend is None:
            logger.warning("no text-to-speech backend found; announcements are silent")
    else:
        speech = SilentSpeech()

    engine = SoundRunnerEngine(settings, audio=audio, speech=speech, scheduler=scheduler, clock=pygame_ms)
    if isinstance(audio, SilentAudioBackend):
        engine.speech_cues = True
    else:
        engine.load_sound(read_car_sound(settings))
    return engine


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings(seed=args.seed, car_sound=args.asset, speech_enabled=not args.no_speech)

    from soundrunner.ui.render import WIDTH, HEIGHT, draw_snapshot

    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption("SOUND RUNNER")
    clock = pygame.time.Clock()

    try:
        font_score = pygame.font.SysFont("Courier New", 28, bold=True)
        font_sub = pygame.font.SysFont("Courier New", 17, bold=True)
    except Exception:
        font_score = pygame.font.SysFont(None, 28)
        font_sub = pygame.font.SysFont(None, 17)

    scheduler = FrameScheduler()
    engine = build_engine(settings, scheduler, audio_enabled=not args.no_audio)
    arbiter = InputArbiter(
        engine,
        tap_window_ms=settings.input.pause_tap_window_ms,
        taps=settings.input.pause_tap_count,
    )
    engine.welcome()

    pygame.key.set_repeat(0, 0)
    dash = 0.0
    running = True

    try:
        while running:
            clock.tick(FPS)
            now = float(pygame.time.get_ticks())

            # ── Events ──────────────────────
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        arbiter.key_pressed(pygame.key.name(event.key), now)

            # ── Update ──────────────────────
            if scheduler.pump(now) == 0:
                # no step this frame; keep speech moving while idle/paused
                engine.announcer.update()
            if engine.snapshot.status is GameStatus.RUNNING and not engine.snapshot.frozen:
                dash += 4.0

            # ── Draw ────────────────────────
            draw_snapshot(screen, engine.snapshot, (font_score, font_sub), dash)
            pygame.display.flip()
    finally:
        engine.teardown()
        scheduler.cancel_all()
        pygame.quit()

    print(f"Final score: {engine.snapshot.score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
