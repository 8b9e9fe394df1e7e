"""Tests for soundrunner.core.engine — loop scheduling, audio/speech wiring, scenarios."""

import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from game_engine import GameStatus, Lane
from soundrunner.audio.backend import AudioSubsystemUnavailable, SilentAudioBackend
from soundrunner.config.loader import load_settings
from soundrunner.core.contracts import GameSnapshot, Intent
from soundrunner.core.engine import SoundRunnerEngine
from soundrunner.runtime.scheduler import FrameScheduler

FRAME = 16.67


class RecordingAudio(SilentAudioBackend):
    def __init__(self, fail_create=False):
        super().__init__()
        self.fail_create = fail_create
        self.created = []
        self.released = []

    def create_voice(self, buffer):
        if self.fail_create:
            raise AudioSubsystemUnavailable("context closed")
        voice = super().create_voice(buffer)
        self.created.append(voice)
        return voice

    def release(self, voice):
        self.released.append(voice.token)
        super().release(voice)


class Pending:
    def __init__(self):
        self.finished = False

    def done(self):
        return self.finished


class FakeSpeech:
    def __init__(self):
        self.calls = []
        self.cancelled = 0

    def speak(self, text, *, cancel_previous=False):
        completion = Pending()
        self.calls.append((text, cancel_previous, completion))
        return completion

    def cancel_all(self):
        self.cancelled += 1

    @property
    def texts(self):
        return [c[0] for c in self.calls]

    def finish_all(self):
        for _, _, completion in self.calls:
            completion.finished = True


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class Rig:
    """Engine plus its fake collaborators."""

    def __init__(self, seed=7, audio=None):
        self.clock = FakeClock()
        self.scheduler = FrameScheduler()
        self.audio = audio or RecordingAudio()
        self.speech = FakeSpeech()
        self.engine = SoundRunnerEngine(
            load_settings(seed=seed),
            audio=self.audio,
            speech=self.speech,
            scheduler=self.scheduler,
            rng=random.Random(seed),
            clock=self.clock,
        )

    @property
    def state(self):
        return self.engine.state

    def start_quiet(self):
        """Start a game whose spawner never fires, then let the start line finish."""
        self.engine.load_sound(b"car")
        assert self.engine.start()
        self.state.spawner.threshold = float("inf")
        self.speech.finish_all()
        self.engine.announcer.update()

    def tick(self, n=1, ms=FRAME):
        for _ in range(n):
            self.clock.now += ms
            self.scheduler.pump(self.clock.now)


class TestScheduling:
    def test_idle_engine_schedules_nothing(self):
        rig = Rig()
        assert not rig.engine.scheduled
        assert rig.engine.step(5000) is None
        assert rig.engine.snapshot.status is GameStatus.IDLE

    def test_start_arms_one_step_and_rearms(self):
        rig = Rig()
        rig.engine.start()
        assert rig.scheduler.pending == 1
        assert rig.speech.calls[-1][:2] == ("Game started!", True)
        rig.tick()
        assert rig.scheduler.pending == 1
        assert rig.engine.snapshot.status is GameStatus.RUNNING

    def test_pause_cancels_step_and_mutes(self):
        rig = Rig()
        rig.start_quiet()
        car = rig.state.spawn(Lane.RIGHT, speed=5, position=100)
        rig.tick()
        voice = rig.engine.driver.voice_for(car.id)
        assert voice.gain > 0

        assert rig.engine.toggle_pause() is GameStatus.PAUSED
        assert rig.scheduler.pending == 0
        assert voice.gain == 0.0
        assert rig.speech.texts[-1] == "Game paused."

        paused_at = car.position
        rig.tick(10)
        assert rig.engine.step(rig.clock.now) is None
        assert car.position == paused_at

    def test_resume_does_not_count_paused_time(self):
        rig = Rig()
        rig.start_quiet()
        car = rig.state.spawn(Lane.RIGHT, speed=5, position=100)
        rig.tick()
        rig.engine.toggle_pause()
        rig.clock.now += 10_000
        rig.engine.toggle_pause()
        before = car.position
        rig.tick()
        assert car.position - before == pytest.approx(5.0)

    def test_large_gap_is_clamped(self):
        rig = Rig()
        rig.start_quiet()
        car = rig.state.spawn(Lane.RIGHT, speed=6, position=100)
        rig.tick(ms=5000)
        assert car.position - 100 == pytest.approx(6 * 100 / 16.67)


class TestScenarios:
    def test_collision_scenario(self):
        rig = Rig()
        rig.start_quiet()
        car = rig.state.spawn(Lane.LEFT, speed=4, position=-50)
        other = rig.state.spawn(Lane.RIGHT, speed=4, position=-50)
        for _ in range(400):
            rig.tick()
            if rig.state.status is GameStatus.GAME_OVER:
                break
        snap = rig.engine.snapshot
        assert snap.status is GameStatus.GAME_OVER
        assert 600 < car.position < 700
        assert rig.speech.calls[-1][:2] == ("Crash! Game over. Final score: 0.", True)
        assert not rig.engine.announcer.frozen

        assert rig.scheduler.pending == 0
        assert rig.engine.driver.voice_ids == set()
        assert sorted(rig.audio.released) == sorted(v.token for v in rig.audio.created)

        frozen_positions = (car.position, other.position)
        rig.engine.step(rig.clock.now + FRAME)
        assert (car.position, other.position) == frozen_positions
        assert len(snap.obstacles) == 2

    def test_switching_lane_scores_once(self):
        rig = Rig()
        rig.start_quiet()
        car = rig.state.spawn(Lane.LEFT, speed=4, position=-50)
        rig.engine.handle_intent(Intent.SWITCH_LANE)
        assert rig.engine.snapshot.player_lane is Lane.RIGHT
        scores = []
        while rig.state.obstacles:
            rig.tick()
            scores.append(rig.engine.snapshot.score)
        assert rig.state.status is GameStatus.RUNNING
        assert car.scored
        assert max(scores) == 1
        assert rig.engine.driver.voice_ids == set()

    def test_score_five_freezes_until_spoken(self):
        rig = Rig()
        rig.start_quiet()
        rig.state.score = 4
        rig.state.spawn(Lane.RIGHT, speed=4, position=647)
        rig.tick()
        assert rig.engine.snapshot.score == 5
        assert rig.speech.texts[-1] == "Score 5."
        assert rig.engine.snapshot.frozen

        car = rig.state.spawn(Lane.RIGHT, speed=4, position=100)
        rig.tick(5)
        assert car.position == 100
        assert rig.engine.snapshot.score == 5
        assert rig.engine.snapshot.frozen

        rig.speech.finish_all()
        rig.tick()
        assert not rig.engine.snapshot.frozen
        assert car.position == pytest.approx(104)

    def test_restart_from_game_over(self):
        rig = Rig()
        rig.start_quiet()
        rig.state.spawn(Lane.RIGHT, speed=4, position=300)
        rig.state.spawn(Lane.LEFT, speed=4, position=590)
        rig.tick(5)
        assert rig.state.status is GameStatus.GAME_OVER
        created = sorted(v.token for v in rig.audio.created)

        rig.engine.handle_intent(Intent.RESTART)
        assert rig.engine.snapshot == GameSnapshot(GameStatus.RUNNING, 0, Lane.LEFT, ())
        assert sorted(rig.audio.released) == created
        assert len(set(rig.audio.released)) == len(rig.audio.released)
        assert rig.scheduler.pending == 1

    def test_positions_monotonic_and_score_matches(self):
        rig = Rig(seed=3)
        rig.engine.load_sound(b"car")
        rig.engine.start()
        last = {}
        scored_ids = set()
        for _ in range(3000):
            rig.tick()
            rig.speech.finish_all()
            if rig.state.status is not GameStatus.RUNNING:
                break
            for o in rig.state.obstacles:
                assert o.position >= last.get(o.id, float("-inf"))
                last[o.id] = o.position
                if o.scored:
                    scored_ids.add(o.id)
        assert rig.state.score >= len(scored_ids)


class TestDegradation:
    def test_bad_asset_switches_to_speech_cues(self):
        rig = Rig()
        assert not rig.engine.load_sound(b"")
        assert rig.engine.speech_cues
        rig.engine.start()
        rig.speech.finish_all()
        rig.engine.announcer.update()
        rig.state.spawner.threshold = 0.0
        rig.tick()
        assert len(rig.state.obstacles) == 1
        lane = rig.state.obstacles[0].lane.value
        assert rig.speech.texts[-1] == f"Car {lane}."
        assert rig.audio.created == []

    def test_voice_failure_never_stops_the_tick(self):
        rig = Rig(audio=RecordingAudio(fail_create=True))
        rig.start_quiet()
        car = rig.state.spawn(Lane.RIGHT, speed=4, position=0)
        rig.tick(3)
        assert car.position == pytest.approx(12)
        assert rig.engine.driver.voice_ids == set()

    def test_teardown_releases_and_cancels(self):
        rig = Rig()
        rig.start_quiet()
        rig.state.spawn(Lane.RIGHT, speed=4, position=0)
        rig.tick()
        assert rig.engine.driver.voice_ids
        cancelled = rig.speech.cancelled
        rig.engine.teardown()
        assert rig.scheduler.pending == 0
        assert rig.engine.driver.voice_ids == set()
        assert rig.audio.closed
        assert rig.speech.cancelled == cancelled + 1
        assert not rig.engine.start()
