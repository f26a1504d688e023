"""Tests for directive rendering and speech activity."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from interaction.arbitrator import AlertDirective
from interaction.feedback import (
    FeedbackDispatcher,
    LoggingCueRenderer,
    LoggingSpeechRenderer,
    SpeechActivity,
    cue_for,
)
from vision.detections import RiskLevel


def _directive(risk: RiskLevel = RiskLevel.HIGH, priority: bool = True, pan: float = -0.5) -> AlertDirective:
    return AlertDirective(text="Moving vehicle ahead.", priority=priority, pan_value=pan, risk=risk, label="car")


@pytest.mark.parametrize(
    ("risk", "frequency", "gain", "strengths"),
    [
        (RiskLevel.HIGH, 880.0, 0.3, ["heavy", "heavy"]),
        (RiskLevel.MEDIUM, 440.0, 0.15, ["medium"]),
        (RiskLevel.LOW, 220.0, 0.1, ["light"]),
    ],
)
def test_cue_shape_follows_risk(risk: RiskLevel, frequency: float, gain: float, strengths: list[str]) -> None:
    cue = cue_for(_directive(risk=risk))

    assert cue.frequency_hz == frequency
    assert cue.gain == gain
    assert cue.pan_value == -0.5
    assert [pulse.strength for pulse in cue.pulses] == strengths


def test_high_risk_double_pulse_is_spaced() -> None:
    cue = cue_for(_directive())

    assert [pulse.delay_ms for pulse in cue.pulses] == [0, 150]


def test_speech_activity_tracks_utterance() -> None:
    activity = SpeechActivity()

    assert activity.is_busy() is False
    activity.start()
    assert activity.is_busy() is True
    activity.finish()
    assert activity.is_busy() is False


def test_held_speech_drops_non_interrupting_text() -> None:
    speech = LoggingSpeechRenderer(hold=True)

    speech.speak("first")
    speech.speak("second")
    speech.speak("urgent", interrupt=True)

    assert speech.spoken == [("first", False), ("urgent", True)]
    assert speech.is_busy() is True
    speech.complete()
    assert speech.is_busy() is False


def test_dispatch_renders_cue_and_speech() -> None:
    speech = LoggingSpeechRenderer()
    cues = LoggingCueRenderer()

    FeedbackDispatcher(speech, cues).dispatch(_directive(priority=False, risk=RiskLevel.LOW))

    assert speech.spoken == [("Moving vehicle ahead.", False)]
    assert cues.cues[0].frequency_hz == 220.0


def test_dispatch_survives_renderer_failures() -> None:
    speech = Mock()
    speech.speak.side_effect = RuntimeError("tts offline")
    cues = Mock()
    cues.play_cue.side_effect = OSError("no audio device")

    dispatcher = FeedbackDispatcher(speech, cues)
    dispatcher.dispatch(_directive())
    dispatcher.announce("Outdoor mode on")

    assert speech.speak.call_count == 2
    cues.play_cue.assert_called_once()


def test_failed_busy_probe_reports_idle() -> None:
    speech = Mock()
    speech.is_busy.side_effect = RuntimeError("engine gone")

    assert FeedbackDispatcher(speech).is_busy() is False
