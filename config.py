"""Shared configuration for Sound Runner."""
from pathlib import Path

from game_engine import (
    GAME_HEIGHT, PLAYER_Y_POSITION, CAR_START_Y, COLLISION_MARGIN,
    REFERENCE_FRAME_MS, MAX_DELTA_MS, MIN_CAR_SPEED, MAX_CAR_SPEED,
    SPAWN_INTERVAL_MS, FIRST_SPAWN_MS, MILESTONE_EVERY,
)

# Directories
PROJECT_DIR = Path(__file__).parent
ASSETS_DIR = PROJECT_DIR / "assets"

# Looping car sound; a generated hum is used when the file is missing
CAR_SOUND = ASSETS_DIR / "car.wav"

# Game settings come from the canonical headless engine constants to avoid drift.

# Random seed (None = fresh game every run)
SEED = None

# Spatial audio
AUDIO_LEAD_DISTANCE = 120       # gain peaks this far before the hit-line
AUDIO_FADE_DISTANCE = 500
AUDIO_GAIN_FLOOR = 0.1
AUDIO_GAIN_HIGH = 0.7
AUDIO_ACTIVATION_START = CAR_START_Y
AUDIO_ACTIVATION_END = GAME_HEIGHT
MIXER_FREQUENCY = 44100
MIXER_BUFFER = 512
MIXER_VOICES = 16

# Speech
SPEECH_ENABLED = True
SPEECH_RATE = 176
SPEECH_FREEZE_TIMEOUT_S = 4.0
SPEECH_MAX_QUEUE = 8
SPEECH_MAX_UTTERANCE_S = 12.0

# Input
PAUSE_TAP_WINDOW_MS = 500
PAUSE_TAP_COUNT = 3
