"""Spoken status and score announcements."""

from .announcer import Announcer, Priority, Utterance
from .backend import (
    Completion,
    Finished,
    SilentSpeech,
    SpeechBackend,
    SpeechUnavailable,
    SubprocessSpeech,
)

__all__ = [
    "Announcer",
    "Completion",
    "Finished",
    "Priority",
    "SilentSpeech",
    "SpeechBackend",
    "SpeechUnavailable",
    "SubprocessSpeech",
    "Utterance",
]
