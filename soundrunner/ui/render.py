"""pygame drawing for the two-lane road. Visuals are secondary to audio."""

from __future__ import annotations

import pygame

from game_engine import GAME_HEIGHT, PLAYER_Y_POSITION, GameStatus, Lane
from soundrunner.core.contracts import GameSnapshot

WIDTH, HEIGHT = 320, GAME_HEIGHT
LANE_CENTERS = {Lane.LEFT: WIDTH // 4, Lane.RIGHT: 3 * WIDTH // 4}
CAR_W, CAR_H = 60, 90

C_BG = (17, 24, 39)
C_ROAD = (31, 41, 55)
C_DASH = (234, 179, 8)
C_WHITE = (255, 255, 255)
C_DIM = (156, 163, 175)
C_PLAYER = (0, 215, 255)
C_OBS = (255, 65, 85)
C_STATUS = {
    GameStatus.IDLE: (37, 99, 235),
    GameStatus.RUNNING: (22, 163, 74),
    GameStatus.PAUSED: (202, 138, 4),
    GameStatus.GAME_OVER: (220, 38, 38),
}


def draw_car(surf, cx, cy, w, h, color, is_player):
    """Rounded car body with windows and lights."""
    rx, ry = cx - w // 2, cy - h // 2
    pygame.draw.rect(surf, color, (rx, ry, w, h), border_radius=9)

    ww = w - 10
    dark = (0, 30, 45) if is_player else (35, 8, 8)
    pygame.draw.rect(surf, dark, (cx - ww // 2, ry + 10, ww, 15), border_radius=4)
    pygame.draw.rect(surf, dark, (cx - ww // 2, ry + h - 25, ww, 13), border_radius=4)
    lights = (210, 255, 255) if is_player else (255, 195, 100)
    light_y = ry + 5 if is_player else ry + h - 11
    pygame.draw.ellipse(surf, lights, (rx + 4, light_y, 10, 6))
    pygame.draw.ellipse(surf, lights, (rx + w - 14, light_y, 10, 6))


def draw_road(screen, dash_offset: float = 0.0) -> None:
    screen.fill(C_ROAD)
    x = WIDTH // 2 - 2
    for y in range(-40 + int(dash_offset) % 40, HEIGHT, 40):
        pygame.draw.rect(screen, C_DASH, (x, y, 4, 28))


def draw_snapshot(screen, snapshot: GameSnapshot, fonts, dash_offset: float = 0.0) -> None:
    """Draw road, cars and HUD for one snapshot."""
    font_score, font_sub = fonts
    draw_road(screen, dash_offset)

    for o in snapshot.obstacles:
        draw_car(screen, LANE_CENTERS[o.lane], int(o.position) + CAR_H // 2, CAR_W, CAR_H, C_OBS, False)
    draw_car(screen, LANE_CENTERS[snapshot.player_lane], PLAYER_Y_POSITION, CAR_W, CAR_H, C_PLAYER, True)

    sc = font_score.render(f"Score: {snapshot.score}", True, C_WHITE)
    screen.blit(sc, (WIDTH // 2 - sc.get_width() // 2, 12))

    label = snapshot.status.value.upper()
    tag = font_sub.render(label, True, C_WHITE)
    pad = 8
    box = pygame.Rect(0, 0, tag.get_width() + pad * 2, tag.get_height() + pad)
    box.center = (WIDTH // 2, 62)
    pygame.draw.rect(screen, C_STATUS[snapshot.status], box, border_radius=12)
    screen.blit(tag, (box.x + pad, box.y + pad // 2))

    if snapshot.status in (GameStatus.IDLE, GameStatus.GAME_OVER):
        hint = "ENTER to start" if snapshot.status is GameStatus.IDLE else "ENTER to restart"
        h = font_sub.render(hint, True, C_DIM)
        screen.blit(h, (WIDTH // 2 - h.get_width() // 2, HEIGHT // 2))
