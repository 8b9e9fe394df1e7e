from __future__ import annotations

import enum
from dataclasses import dataclass

from game_engine import GameState, GameStatus, Lane


class Intent(enum.Enum):
    SWITCH_LANE = "switch_lane"
    TOGGLE_PAUSE = "toggle_pause"
    START = "start"
    RESTART = "restart"


@dataclass(frozen=True)
class ObstacleView:
    id: str
    lane: Lane
    position: float


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the game for the presentation layer."""
    status: GameStatus
    score: int
    player_lane: Lane
    obstacles: tuple[ObstacleView, ...] = ()
    frozen: bool = False

    @classmethod
    def of(cls, state: GameState, *, frozen: bool = False) -> "GameSnapshot":
        return cls(
            status=state.status,
            score=state.score,
            player_lane=state.player_lane,
            obstacles=tuple(ObstacleView(o.id, o.lane, o.position) for o in state.obstacles),
            frozen=frozen,
        )
