"""Speech adapters. Text-to-speech itself runs out of process."""

from __future__ import annotations

import importlib.util
import logging
import os
import shutil
import subprocess
import sys
import time
from typing import Protocol

logger = logging.getLogger(__name__)


class SpeechUnavailable(RuntimeError):
    """No text-to-speech backend can be used."""


class Completion(Protocol):
    def done(self) -> bool: ...


class SpeechBackend(Protocol):
    def speak(self, text: str, *, cancel_previous: bool = False) -> Completion: ...
    def cancel_all(self) -> None: ...


class Finished:
    """Completion that is already done."""

    def done(self) -> bool:
        return True


class ProcessCompletion:
    """Done when the speaking process exits or overruns its time limit."""

    def __init__(self, proc: subprocess.Popen, max_utterance_s: float):
        self.proc = proc
        self.started = time.monotonic()
        self.max_utterance_s = max_utterance_s

    def done(self) -> bool:
        if self.proc.poll() is not None:
            return True
        if time.monotonic() - self.started > self.max_utterance_s:
            _terminate_process(self.proc)
            return True
        return False


def _terminate_process(proc: subprocess.Popen) -> None:
    try:
        proc.terminate()
    except OSError:
        return
    try:
        proc.wait(timeout=0.5)
    except subprocess.TimeoutExpired:
        try:
            proc.kill()
        except OSError:
            pass


_PYTTSX3_SCRIPT = (
    "import sys\n"
    "txt=' '.join(sys.argv[2:]).strip()\n"
    "import pyttsx3\n"
    "e=pyttsx3.init()\n"
    "e.setProperty('rate', int(sys.argv[1]))\n"
    "e.say(txt)\n"
    "e.runAndWait()\n"
)


class SubprocessSpeech:
    """Best-effort offline TTS via one short-lived process per utterance.

    pyttsx3 is driven from a child interpreter so a crashing speech engine
    cannot take the game down with it. macOS `say` and `espeak` are used
    when pyttsx3 is missing.
    """

    supported = ("pyttsx3", "say", "espeak")

    def __init__(self, rate: int = 176, max_utterance_s: float = 12.0, backend: str | None = None):
        self.rate = rate
        self.max_utterance_s = max_utterance_s
        self._backends = [backend] if backend else self._resolve_backends()
        self._active: subprocess.Popen | None = None

    @property
    def backend(self) -> str | None:
        return self._backends[0] if self._backends else None

    @classmethod
    def _resolve_backends(cls) -> list[str]:
        forced = os.environ.get("SOUNDRUNNER_TTS_BACKEND", "").strip().lower()
        if forced in cls.supported and cls._backend_available(forced):
            return [forced]
        candidates = ["say"] if sys.platform == "darwin" else []
        candidates.extend(("pyttsx3", "espeak"))
        return [name for name in candidates if cls._backend_available(name)]

    @staticmethod
    def _backend_available(name: str) -> bool:
        if name == "pyttsx3":
            return importlib.util.find_spec("pyttsx3") is not None
        return shutil.which(name) is not None

    def _command(self, name: str, text: str) -> list[str]:
        if name == "pyttsx3":
            return [sys.executable, "-c", _PYTTSX3_SCRIPT, str(self.rate), text]
        if name == "say":
            return [shutil.which("say") or "/usr/bin/say", "-r", str(self.rate), text]
        return ["espeak", "-s", str(self.rate), text]

    def speak(self, text: str, *, cancel_previous: bool = False) -> Completion:
        if cancel_previous:
            self.cancel_all()
        while self._backends:
            name = self._backends[0]
            try:
                proc = subprocess.Popen(
                    self._command(name, text),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as exc:
                logger.warning("speech backend %s failed (%s); dropping it", name, exc)
                self._backends.pop(0)
                continue
            self._active = proc
            return ProcessCompletion(proc, self.max_utterance_s)
        raise SpeechUnavailable("no text-to-speech backend available")

    def cancel_all(self) -> None:
        proc, self._active = self._active, None
        if proc is not None and proc.poll() is None:
            _terminate_process(proc)


class SilentSpeech:
    """Logs utterances instead of speaking them. Every completion is immediate."""

    def __init__(self):
        self.spoken: list[str] = []

    def speak(self, text: str, *, cancel_previous: bool = False) -> Completion:
        logger.debug("say: %s", text)
        self.spoken.append(text)
        return Finished()

    def cancel_all(self) -> None:
        pass
