"""Game loop wiring: one scheduled step per frame, audio and speech kept in
step with the simulation."""

from __future__ import annotations

import logging
import random
from typing import Callable

from game_engine import GameState, GameStatus, Obstacle, TickResult
from soundrunner.audio.backend import AssetDecodeError, AudioBackend, AudioSubsystemUnavailable
from soundrunner.audio.spatial import SpatialAudioDriver
from soundrunner.config.schema import Settings
from soundrunner.core.clock import Stepper, monotonic_ms
from soundrunner.core.contracts import GameSnapshot, Intent
from soundrunner.runtime.scheduler import Scheduler
from soundrunner.speech.announcer import Announcer, Priority
from soundrunner.speech.backend import SpeechBackend

logger = logging.getLogger(__name__)

WELCOME = "Game loaded. Press Enter to start. Press Space to switch lanes. Triple-press space to pause or resume."


class SoundRunnerEngine:
    """Single-threaded game engine.

    Intents (`start`, `switch_lane`, `toggle_pause`) and steps run on the
    same thread, each as one complete update of the state. The next step is
    requested only after the current one finishes, and only while running.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        audio: AudioBackend,
        speech: SpeechBackend,
        scheduler: Scheduler,
        rng: random.Random | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.settings = settings
        self.state = GameState(rng=rng or random.Random(settings.seed), tuning=settings.tuning)
        self.stepper = Stepper(settings.tuning.max_delta_ms)
        self.driver = SpatialAudioDriver(audio, settings.audio, settings.audio_peak)
        self.announcer = Announcer(
            speech,
            freeze_timeout_s=settings.speech.freeze_timeout_s,
            max_queue=settings.speech.max_queue,
            clock=lambda: clock() / 1000.0,
        )
        self.scheduler = scheduler
        self._clock = clock
        self._token: int | None = None
        self._closed = False
        self.speech_cues = False
        self.snapshot = GameSnapshot.of(self.state)

    # ── Setup / teardown ────────────────

    def load_sound(self, data: bytes) -> bool:
        """Decode the car loop. On failure obstacles are announced by speech instead."""
        try:
            self.driver.load_asset(data)
        except (AssetDecodeError, AudioSubsystemUnavailable) as exc:
            logger.warning("car sound unavailable, using speech cues: %s", exc)
            self.speech_cues = True
            return False
        self.speech_cues = False
        return True

    def welcome(self) -> None:
        self.announcer.say(WELCOME, Priority.LOW)

    def teardown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._disarm()
        self.driver.close()
        self.announcer.cancel_all()

    @property
    def scheduled(self) -> bool:
        return self._token is not None

    # ── Intents ─────────────────────────

    def handle_intent(self, intent: Intent) -> None:
        if intent in (Intent.START, Intent.RESTART):
            self.start()
        elif intent is Intent.SWITCH_LANE:
            self.switch_lane()
        elif intent is Intent.TOGGLE_PAUSE:
            self.toggle_pause()

    def start(self) -> bool:
        if self._closed or not self.state.start():
            return False
        self.driver.release_all()
        self.announcer.cancel_all()
        self.announcer.say("Game started!", Priority.HIGH)
        self.stepper.reset(self._clock())
        self._refresh()
        self._arm()
        logger.info("game started")
        return True

    restart = start

    def switch_lane(self) -> bool:
        changed = self.state.switch_lane()
        if changed:
            self._refresh()
        return changed

    def toggle_pause(self) -> GameStatus | None:
        status = self.state.toggle_pause()
        if status is GameStatus.PAUSED:
            self._disarm()
            self.driver.mute_all()
            self.announcer.say("Game paused.")
        elif status is GameStatus.RUNNING:
            self.stepper.reset(self._clock())
            self.announcer.say("Resuming.")
            self._arm()
        if status is not None:
            self._refresh()
        return status

    # ── Loop ────────────────────────────

    def _arm(self) -> None:
        if self._token is None and not self._closed:
            self._token = self.scheduler.request_step(self._on_step)

    def _disarm(self) -> None:
        if self._token is not None:
            self.scheduler.cancel_step(self._token)
            self._token = None

    def _on_step(self, timestamp_ms: float) -> None:
        self._token = None
        self.step(timestamp_ms)
        if self.state.status is GameStatus.RUNNING:
            self._arm()

    def step(self, now_ms: float) -> TickResult | None:
        """Run one tick at wall time `now_ms`. None when nothing advanced."""
        delta = self.stepper.step(now_ms)
        self.announcer.update()
        if self.state.status is not GameStatus.RUNNING or self.announcer.frozen:
            self._refresh()
            return None

        result = self.state.advance(delta)

        if result.spawned is not None:
            self._on_spawn(result.spawned)

        if result.collision is not None:
            self._on_collision()
            return result

        for o in result.despawned:
            self.driver.release(o.id)
        self.driver.sync(self.state.obstacles)

        if result.milestone is not None:
            self.announcer.say(f"Score {result.milestone}.", Priority.LOW, freeze=True)
        self._refresh()
        return result

    def _on_spawn(self, obstacle: Obstacle) -> None:
        if self.speech_cues:
            self.announcer.say(f"Car {obstacle.lane.value}.", Priority.LOW)
        else:
            self.driver.attach(obstacle)

    def _on_collision(self) -> None:
        self.driver.release_all()
        self._disarm()
        score = self.state.score
        self.announcer.say(f"Crash! Game over. Final score: {score}.", Priority.HIGH)
        self._refresh()
        logger.info("game over, score %d", score)

    def _refresh(self) -> None:
        self.snapshot = GameSnapshot.of(self.state, frozen=self.announcer.frozen)
