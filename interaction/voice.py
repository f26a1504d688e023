"""Voice command helpers: transcript keywords and the listening window."""

from __future__ import annotations

import re

from core.logging import logger
from vision.modes import OperatingMode

MODE_KEYWORDS: tuple[tuple[OperatingMode, tuple[str, ...]], ...] = (
    (OperatingMode.OUTDOOR, ("outdoor", "outside", "street", "rua", "externo", "fora")),
    (OperatingMode.INDOOR, ("indoor", "inside", "home", "interno", "casa", "dentro")),
    (OperatingMode.READING, ("reading", "read", "text", "leitura", "ler", "texto")),
)

_WORD = re.compile(r"[\wÀ-ÿ]+")

LISTEN_TIMEOUT_MS = 5000


def mode_from_transcript(text: str) -> OperatingMode | None:
    """Return the mode a transcript asks for, or None when none matches."""

    words = set(_WORD.findall(text.strip().lower()))
    if not words:
        return None
    for mode, keywords in MODE_KEYWORDS:
        if words.intersection(keywords):
            return mode
    return None


class ListeningWindow:
    """Tracks whether a voice command is being awaited.

    A window opened with :meth:`open` closes on :meth:`close` or once
    ``timeout_ms`` has elapsed, after which the command is treated as absent.
    """

    def __init__(self, timeout_ms: int = LISTEN_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms
        self._opened_ms: int | None = None

    def open(self, now_ms: int) -> bool:
        if self.is_listening(now_ms):
            return False
        self._opened_ms = now_ms
        logger.info("[VOICE] listening")
        return True

    def close(self) -> None:
        self._opened_ms = None

    def is_listening(self, now_ms: int) -> bool:
        if self._opened_ms is None:
            return False
        if now_ms - self._opened_ms >= self.timeout_ms:
            logger.info("[VOICE] no command within %sms", self.timeout_ms)
            self._opened_ms = None
            return False
        return True

    def resolve(self, transcript: str | None, now_ms: int) -> OperatingMode | None:
        """Close the window and return the requested mode, if any."""

        if not self.is_listening(now_ms):
            return None
        self.close()
        if not transcript:
            return None
        mode = mode_from_transcript(transcript)
        logger.info("[VOICE] %r -> %s", transcript, mode.value if mode else "no match")
        return mode
