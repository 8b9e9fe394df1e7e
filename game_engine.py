"""
Pure game logic for SOUND RUNNER — no pygame dependency.
Used by the engine, the headless simulator, and the pygame front end.
"""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field

# ─────────────────────────────────────────
# Constants
# ─────────────────────────────────────────
GAME_HEIGHT = 800            # play-field length along the travel axis
PLAYER_Y_POSITION = 650      # hit-line
CAR_START_Y = -100
COLLISION_MARGIN = 50

FPS = 60
REFERENCE_FRAME_MS = 16.67   # speed is expressed in units per reference frame
MAX_DELTA_MS = 100.0

MIN_CAR_SPEED = 4.0
MAX_CAR_SPEED = 7.0
SPAWN_INTERVAL_MS = (1500.0, 4000.0)
FIRST_SPAWN_MS = (2000.0, 4000.0)

MILESTONE_EVERY = 5


class GameStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game over"


class Lane(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def other(self) -> "Lane":
        return Lane.RIGHT if self is Lane.LEFT else Lane.LEFT

    @property
    def pan(self) -> int:
        """Stereo position for this lane: -1 full left, +1 full right."""
        return -1 if self is Lane.LEFT else 1


@dataclass(frozen=True)
class Tuning:
    """Gameplay constants, grouped so settings can override them together."""
    field_length: float = GAME_HEIGHT
    hit_line: float = PLAYER_Y_POSITION
    start_position: float = CAR_START_Y
    margin: float = COLLISION_MARGIN
    reference_frame_ms: float = REFERENCE_FRAME_MS
    max_delta_ms: float = MAX_DELTA_MS
    speed_range: tuple[float, float] = (MIN_CAR_SPEED, MAX_CAR_SPEED)
    spawn_interval_ms: tuple[float, float] = SPAWN_INTERVAL_MS
    first_spawn_ms: tuple[float, float] = FIRST_SPAWN_MS
    milestone_every: int = MILESTONE_EVERY

    def normalize(self, delta_ms: float) -> float:
        return delta_ms / self.reference_frame_ms

    @property
    def max_tick_displacement(self) -> float:
        """Largest distance one obstacle can travel in a single clamped tick."""
        return self.speed_range[1] * self.normalize(self.max_delta_ms)


# ─────────────────────────────────────────
# Game objects
# ─────────────────────────────────────────

class Obstacle:
    def __init__(self, obstacle_id: str, lane: Lane, speed: float, position: float = CAR_START_Y):
        self.id = obstacle_id
        self.lane = lane
        self.speed = speed
        self.position = float(position)
        self.scored = False

    def update(self, distance: float) -> tuple[float, float]:
        """Move forward by `distance`; returns (before, after)."""
        before = self.position
        self.position += distance
        return before, self.position

    def gone(self, field_length: float = GAME_HEIGHT) -> bool:
        return self.position > field_length

    def __repr__(self) -> str:
        return f"Obstacle({self.id!r}, {self.lane.value}, pos={self.position:.1f}, speed={self.speed:.2f})"


def should_spawn(elapsed_since_last_spawn: float, threshold: float) -> bool:
    return elapsed_since_last_spawn > threshold


class Spawner:
    """Randomized spawn timer. One obstacle per tick at most."""

    def __init__(self, rng: random.Random, tuning: Tuning):
        self.rng = rng
        self.tuning = tuning
        self.elapsed = 0.0
        self.threshold = 0.0
        self.reset()

    def reset(self):
        self.elapsed = 0.0
        self.threshold = self.rng.uniform(*self.tuning.first_spawn_ms)

    def tick(self, delta_ms: float) -> Lane | None:
        """Advance the timer; return the lane for a new obstacle, or None."""
        self.elapsed += delta_ms
        if not should_spawn(self.elapsed, self.threshold):
            return None
        self.elapsed = 0.0
        self.threshold = self.rng.uniform(*self.tuning.spawn_interval_ms)
        return Lane.LEFT if self.rng.random() < 0.5 else Lane.RIGHT

    def draw_speed(self) -> float:
        return self.rng.uniform(*self.tuning.speed_range)


# ─────────────────────────────────────────
# Collision & scoring
# ─────────────────────────────────────────

class Verdict(enum.Enum):
    NONE = "none"
    SCORE = "score"
    COLLISION = "collision"


def evaluate(p0: float, p1: float, obstacle_lane: Lane, player_lane: Lane, scored: bool,
             hit_line: float = PLAYER_Y_POSITION, margin: float = COLLISION_MARGIN) -> Verdict:
    """Judge one obstacle's move from p0 to p1 against the hit-line.

    Collision uses the swept segment [p0, p1] against the open window
    (hit_line - margin, hit_line + margin), so a long tick cannot carry an
    obstacle through the player. Scoring fires on the tick whose move crosses
    the hit-line, and only for an obstacle that has not scored yet.
    Collision wins over scoring.
    """
    if obstacle_lane is player_lane and p0 < hit_line + margin and p1 > hit_line - margin:
        return Verdict.COLLISION
    if not scored and p0 < hit_line <= p1:
        return Verdict.SCORE
    return Verdict.NONE


@dataclass
class TickResult:
    """What changed during one tick, for the audio and speech layers."""
    delta_ms: float = 0.0
    spawned: Obstacle | None = None
    scored: list[Obstacle] = field(default_factory=list)
    despawned: list[Obstacle] = field(default_factory=list)
    collision: Obstacle | None = None
    milestone: int | None = None

    @property
    def advanced(self) -> bool:
        return self.delta_ms > 0.0


class GameState:
    def __init__(self, seed=None, rng: random.Random | None = None, tuning: Tuning | None = None):
        self.rng = rng or random.Random(seed)
        self.tuning = tuning or Tuning()
        self.spawner = Spawner(self.rng, self.tuning)
        self.status = GameStatus.IDLE
        self.player_lane = Lane.LEFT
        self.obstacles: list[Obstacle] = []
        self.score = 0
        self.frame = 0
        self._next_id = 0
        self._announced: set[int] = set()

    @property
    def alive(self) -> bool:
        return self.status is not GameStatus.GAME_OVER

    # ── Intents ─────────────────────────

    def start(self) -> bool:
        """Idle/GameOver -> Running with a full reset. False if not allowed."""
        if self.status not in (GameStatus.IDLE, GameStatus.GAME_OVER):
            return False
        self.status = GameStatus.RUNNING
        self.player_lane = Lane.LEFT
        self.obstacles = []
        self.score = 0
        self.frame = 0
        self._announced.clear()
        self.spawner.reset()
        return True

    def switch_lane(self) -> bool:
        if self.status is not GameStatus.RUNNING:
            return False
        self.player_lane = self.player_lane.other
        return True

    def toggle_pause(self) -> GameStatus | None:
        """Running <-> Paused. Returns the new status, or None if ignored."""
        if self.status is GameStatus.RUNNING:
            self.status = GameStatus.PAUSED
        elif self.status is GameStatus.PAUSED:
            self.status = GameStatus.RUNNING
        else:
            return None
        return self.status

    # ── Tick ────────────────────────────

    def _new_id(self) -> str:
        self._next_id += 1
        return f"{self._next_id}-{self.rng.getrandbits(16):04x}"

    def spawn(self, lane: Lane, speed: float | None = None, position: float | None = None) -> Obstacle:
        obstacle = Obstacle(
            self._new_id(),
            lane,
            self.spawner.draw_speed() if speed is None else speed,
            self.tuning.start_position if position is None else position,
        )
        self.obstacles.append(obstacle)
        return obstacle

    def advance(self, delta_ms: float) -> TickResult:
        """Advance the world by one tick of `delta_ms` milliseconds."""
        if self.status is not GameStatus.RUNNING:
            return TickResult()

        result = TickResult(delta_ms=delta_ms)
        self.frame += 1

        lane = self.spawner.tick(delta_ms)
        if lane is not None:
            result.spawned = self.spawn(lane)

        step = self.tuning.normalize(delta_ms)
        hit_line, margin = self.tuning.hit_line, self.tuning.margin
        for o in self.obstacles:
            p0, p1 = o.update(o.speed * step)
            verdict = evaluate(p0, p1, o.lane, self.player_lane, o.scored, hit_line, margin)
            if verdict is Verdict.COLLISION and result.collision is None:
                result.collision = o
            elif verdict is Verdict.SCORE:
                result.scored.append(o)

        previous = self.score
        for o in result.scored:
            o.scored = True
        self.score += len(result.scored)

        if result.collision is not None:
            # world stays as it was on the crash tick
            self.status = GameStatus.GAME_OVER
            return result

        result.milestone = self._milestone_between(previous, self.score)

        result.despawned = [o for o in self.obstacles if o.gone(self.tuning.field_length)]
        if result.despawned:
            self.obstacles = [o for o in self.obstacles if not o.gone(self.tuning.field_length)]
        return result

    def _milestone_between(self, previous: int, current: int) -> int | None:
        every = self.tuning.milestone_every
        reached = None
        for value in range(previous + 1, current + 1):
            if value > 0 and value % every == 0 and value not in self._announced:
                self._announced.add(value)
                reached = value
        return reached

    # ── Views ───────────────────────────

    def encode(self):
        """Encode current state as dict for replay."""
        obs_list = [[o.lane.value, round(o.position / self.tuning.field_length, 4)] for o in self.obstacles]
        return {
            "lane": self.player_lane.value,
            "obs": obs_list,
            "status": self.status.value,
            "alive": self.alive,
            "score": self.score,
            "frame": self.frame,
        }

    def get_nearest_obstacles(self) -> dict[Lane, float]:
        """Normalized distance to the nearest threatening obstacle per lane. 1.0 = none."""
        distances = {Lane.LEFT: 1.0, Lane.RIGHT: 1.0}
        limit = self.tuning.hit_line + self.tuning.margin
        for o in self.obstacles:
            if o.position < limit:
                norm_dist = max(0.0, self.tuning.hit_line - o.position) / self.tuning.field_length
                if norm_dist < distances[o.lane]:
                    distances[o.lane] = norm_dist
        return distances
