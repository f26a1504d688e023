"""Rendering interfaces and dispatch of alert directives."""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import Protocol

from core.logging import logger
from interaction.arbitrator import AlertDirective
from vision.detections import RiskLevel


@dataclass(frozen=True)
class HapticPulse:
    """One vibration impulse; ``delay_ms`` is relative to the cue start."""

    strength: str
    delay_ms: int = 0


@dataclass(frozen=True)
class SpatialCue:
    """Panned beep plus vibration pattern for one directive."""

    pan_value: float
    frequency_hz: float
    gain: float
    duration_s: float
    pulses: tuple[HapticPulse, ...]


_CUE_SHAPES = {
    RiskLevel.HIGH: (880.0, 0.3, 0.15, (HapticPulse("heavy"), HapticPulse("heavy", 150))),
    RiskLevel.MEDIUM: (440.0, 0.15, 0.3, (HapticPulse("medium"),)),
    RiskLevel.LOW: (220.0, 0.1, 0.3, (HapticPulse("light"),)),
}


def cue_for(directive: AlertDirective) -> SpatialCue:
    """Return the beep and vibration plan for a directive's risk and pan."""

    frequency_hz, gain, duration_s, pulses = _CUE_SHAPES[directive.risk]
    return SpatialCue(
        pan_value=directive.pan_value,
        frequency_hz=frequency_hz,
        gain=gain,
        duration_s=duration_s,
        pulses=pulses,
    )


class SpeechRenderer(Protocol):
    """Text-to-speech collaborator."""

    def speak(self, text: str, interrupt: bool = False) -> None:
        """Start speaking ``text``; interrupt current speech when asked."""

    def is_busy(self) -> bool:
        """Return whether an utterance is currently being rendered."""


class CueRenderer(Protocol):
    """Spatial audio and haptic collaborator."""

    def play_cue(self, cue: SpatialCue) -> None:
        """Render a panned beep and its vibration pattern."""


class SpeechActivity:
    """Busy flag owned by a speech renderer.

    The renderer calls :meth:`start` when an utterance begins and
    :meth:`finish` from its completion or error callback.
    """

    def __init__(self) -> None:
        self._speaking = threading.Event()

    def start(self) -> None:
        self._speaking.set()

    def finish(self) -> None:
        self._speaking.clear()

    def is_busy(self) -> bool:
        return self._speaking.is_set()


class LoggingSpeechRenderer:
    """Speech renderer that writes utterances to the log.

    Used when no TTS engine is attached. Utterances complete immediately
    unless ``hold`` is set, which keeps the busy flag raised until
    :meth:`complete` is called.
    """

    def __init__(self, *, hold: bool = False) -> None:
        self.activity = SpeechActivity()
        self.spoken: list[tuple[str, bool]] = []
        self._hold = hold

    def speak(self, text: str, interrupt: bool = False) -> None:
        if self.activity.is_busy() and not interrupt:
            logger.info("[SPEECH] busy, dropping: %s", text)
            return
        self.activity.start()
        self.spoken.append((text, interrupt))
        logger.info("[SPEECH]%s %s", " (interrupt)" if interrupt else "", text)
        if not self._hold:
            self.activity.finish()

    def complete(self) -> None:
        self.activity.finish()

    def is_busy(self) -> bool:
        return self.activity.is_busy()


class LoggingCueRenderer:
    """Cue renderer that records and logs cues instead of playing them."""

    def __init__(self) -> None:
        self.cues: list[SpatialCue] = []

    def play_cue(self, cue: SpatialCue) -> None:
        self.cues.append(cue)
        logger.debug(
            "[CUE] pan=%.2f freq=%.0fHz gain=%.2f pulses=%s",
            cue.pan_value,
            cue.frequency_hz,
            cue.gain,
            ",".join(pulse.strength for pulse in cue.pulses),
        )


class FeedbackDispatcher:
    """Hand directives to the speech and cue renderers, fire-and-forget."""

    def __init__(self, speech: SpeechRenderer, cues: CueRenderer | None = None) -> None:
        self.speech = speech
        self.cues = cues

    def is_busy(self) -> bool:
        try:
            return bool(self.speech.is_busy())
        except Exception:
            logger.exception("[FEEDBACK] speech busy probe failed")
            return False

    def dispatch(self, directive: AlertDirective) -> None:
        """Render a directive; renderer errors are logged, never raised."""

        if self.cues is not None:
            try:
                self.cues.play_cue(cue_for(directive))
            except Exception:
                logger.exception("[FEEDBACK] cue renderer failed for %s", directive.label)
        try:
            self.speech.speak(directive.text, interrupt=directive.priority)
        except Exception:
            logger.exception("[FEEDBACK] speech renderer failed for %s", directive.label)

    def announce(self, text: str, interrupt: bool = True) -> None:
        """Speak a system message such as a mode change."""

        try:
            self.speech.speak(text, interrupt=interrupt)
        except Exception:
            logger.exception("[FEEDBACK] speech renderer failed for announcement")
