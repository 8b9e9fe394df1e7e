"""Tests for the clock stepper, frame scheduler and input arbiter."""

import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from game_engine import GameStatus
from soundrunner.core.clock import Stepper
from soundrunner.core.contracts import Intent
from soundrunner.runtime.input import InputArbiter, TripleTapDetector
from soundrunner.runtime.scheduler import FrameScheduler


class TestStepper:
    def test_first_step_is_zero(self):
        assert Stepper().step(5000) == 0.0

    def test_delta_is_clamped(self):
        s = Stepper(max_delta_ms=100)
        s.reset(0)
        assert s.step(16) == 16
        assert s.step(5016) == 100

    def test_reset_discards_elapsed_time(self):
        s = Stepper()
        s.reset(0)
        s.step(20)
        s.reset(60_000)
        assert s.step(60_010) == 10

    def test_clock_going_backwards_gives_zero(self):
        s = Stepper()
        s.reset(100)
        assert s.step(90) == 0.0


class TestFrameScheduler:
    def test_pump_runs_each_callback_once(self):
        sched = FrameScheduler()
        seen = []
        sched.request_step(seen.append)
        assert sched.pump(10) == 1
        assert sched.pump(20) == 0
        assert seen == [10]

    def test_cancel(self):
        sched = FrameScheduler()
        seen = []
        token = sched.request_step(seen.append)
        sched.cancel_step(token)
        sched.cancel_step(token)
        sched.pump(10)
        assert seen == []

    def test_rearm_runs_next_frame(self):
        sched = FrameScheduler()
        seen = []

        def step(ts):
            seen.append(ts)
            sched.request_step(step)

        sched.request_step(step)
        sched.pump(1)
        sched.pump(2)
        assert seen == [1, 2]
        assert sched.pending == 1
        sched.cancel_all()
        assert sched.pending == 0


class TestTripleTap:
    def test_three_quick_taps(self):
        d = TripleTapDetector(window_ms=500)
        assert not d.tap(0)
        assert not d.tap(200)
        assert d.tap(400)
        assert d.count == 0

    def test_slow_taps_restart_count(self):
        d = TripleTapDetector(window_ms=500)
        d.tap(0)
        d.tap(200)
        assert not d.tap(800)
        assert d.count == 1


class StubEngine:
    def __init__(self, status):
        self.snapshot = SimpleNamespace(status=status)
        self.handled = []

    def handle_intent(self, intent):
        self.handled.append(intent)


class TestInputArbiter:
    def test_enter_starts_from_idle_and_restarts_after_crash(self):
        engine = StubEngine(GameStatus.IDLE)
        arbiter = InputArbiter(engine)
        assert arbiter.key_pressed("return", 0) == [Intent.START]
        engine.snapshot.status = GameStatus.GAME_OVER
        assert arbiter.key_pressed("return", 10) == [Intent.RESTART]
        engine.snapshot.status = GameStatus.RUNNING
        assert arbiter.key_pressed("return", 20) == []

    def test_space_switches_lane_and_triple_pauses(self):
        engine = StubEngine(GameStatus.RUNNING)
        arbiter = InputArbiter(engine)
        assert arbiter.key_pressed("space", 0) == [Intent.SWITCH_LANE]
        assert arbiter.key_pressed("space", 100) == [Intent.SWITCH_LANE]
        assert arbiter.key_pressed("space", 200) == [Intent.SWITCH_LANE, Intent.TOGGLE_PAUSE]
        assert engine.handled[-2:] == [Intent.SWITCH_LANE, Intent.TOGGLE_PAUSE]

    def test_space_while_paused_only_counts_taps(self):
        engine = StubEngine(GameStatus.PAUSED)
        arbiter = InputArbiter(engine)
        assert arbiter.key_pressed("space", 0) == []
        assert arbiter.key_pressed("space", 100) == []
        assert arbiter.key_pressed("space", 200) == [Intent.TOGGLE_PAUSE]

    def test_p_toggles_pause(self):
        engine = StubEngine(GameStatus.RUNNING)
        arbiter = InputArbiter(engine)
        assert arbiter.key_pressed("P", 0) == [Intent.TOGGLE_PAUSE]

    def test_keys_ignored_when_idle(self):
        engine = StubEngine(GameStatus.IDLE)
        arbiter = InputArbiter(engine)
        assert arbiter.key_pressed("space", 0) == []
        assert arbiter.key_pressed("p", 10) == []
        assert engine.handled == []
