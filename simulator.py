#!/usr/bin/env python3
"""Headless game simulator — runs the engine with an autopilot, records replay data."""

import argparse
import random

import numpy as np

from game_engine import FPS, GameStatus
from soundrunner.audio.backend import SilentAudioBackend
from soundrunner.config.loader import load_settings
from soundrunner.core.engine import SoundRunnerEngine
from soundrunner.runtime.scheduler import FrameScheduler
from soundrunner.speech.backend import SilentSpeech

# Safety limit: stop if game exceeds this many frames (~3 minutes at 60fps)
MAX_FRAMES = 12_000
FRAME_MS = 1000.0 / FPS


class AutopilotPolicy:
    """Switches lanes when a car in the current lane gets within `reaction` of the player.

    `reaction` is a fraction of the play-field length; smaller values mean a
    later (and riskier) dodge.
    """

    def __init__(self, reaction=0.3, hold_frames=6):
        self.reaction = reaction
        self.hold_frames = hold_frames
        self._cooldown = 0

    def decide(self, game):
        """Return True to switch lanes this frame."""
        if self._cooldown > 0:
            self._cooldown -= 1
            return False
        nearest = game.get_nearest_obstacles()
        here, there = game.player_lane, game.player_lane.other
        if nearest[here] < self.reaction and nearest[there] > nearest[here]:
            self._cooldown = self.hold_frames
            return True
        return False


def simulate(seed=0, policy=None, max_frames=MAX_FRAMES):
    """
    Run one headless game simulation.

    Args:
        seed: random seed for deterministic replay
        policy: object with decide(game) -> bool, defaults to AutopilotPolicy()
        max_frames: stop after this many steps even if still alive

    Returns:
        dict: {
            'alive_time': int (frames survived),
            'score': int,
            'seed': int,
            'spoken': list of announcement strings,
            'frames': list of frame dicts for replay
        }

    Each frame dict contains the output of GameState.encode() plus a
    'decision' key (1 when the policy switched lanes on that frame).
    """
    settings = load_settings(seed=seed)
    policy = policy or AutopilotPolicy()
    scheduler = FrameScheduler()
    speech = SilentSpeech()
    now = [0.0]
    engine = SoundRunnerEngine(
        settings,
        audio=SilentAudioBackend(),
        speech=speech,
        scheduler=scheduler,
        rng=random.Random(seed),
        clock=lambda: now[0],
    )
    engine.load_sound(b"headless")
    engine.start()
    game = engine.state

    frames = []
    steps = 0
    decision = 0
    while game.status is GameStatus.RUNNING and steps < max_frames:
        decision = 1 if policy.decide(game) else 0
        if decision:
            engine.switch_lane()

        now[0] += FRAME_MS
        scheduler.pump(now[0])
        steps += 1

        # Record every other frame for replay (keeps data manageable)
        if steps % 2 == 0:
            state = game.encode()
            state["decision"] = decision
            frames.append(state)

    # Record final frame on death
    if not frames or frames[-1].get("frame") != game.frame:
        final = game.encode()
        final["decision"] = decision
        frames.append(final)

    engine.teardown()
    return {
        "alive_time": steps,
        "score": game.score,
        "seed": seed,
        "spoken": list(speech.spoken),
        "frames": frames,
    }


def simulate_batch(seeds, policy_factory=AutopilotPolicy):
    """Run several simulations and aggregate survival and score."""
    runs = [simulate(seed, policy_factory()) for seed in seeds]
    alive = [r["alive_time"] for r in runs]
    scores = [r["score"] for r in runs]
    return {
        "avg_alive": float(np.mean(alive)),
        "std_alive": float(np.std(alive)),
        "avg_score": float(np.mean(scores)),
        "max_score": int(np.max(scores)),
        "runs": runs,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Headless Sound Runner simulation")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--runs", type=int, default=1)
    parser.add_argument("--reaction", type=float, default=0.3)
    args = parser.parse_args(argv)

    seeds = [args.seed + i for i in range(args.runs)]
    summary = simulate_batch(seeds, lambda: AutopilotPolicy(reaction=args.reaction))
    for r in summary["runs"]:
        print(f"  seed {r['seed']}: score {r['score']}, alive {r['alive_time']} frames "
              f"({r['alive_time'] / FPS:.1f} sec)")
    print(f"Average score: {summary['avg_score']:.1f} (max {summary['max_score']})")
    print(f"Average alive: {summary['avg_alive']:.0f} frames (+/- {summary['std_alive']:.0f})")


if __name__ == "__main__":
    main()
