"""Interaction package: arbitration, phrasing and feedback rendering."""

from interaction.arbitrator import AlertDirective, AnnouncementHistory, ArbitrationConfig, Arbitrator
from interaction.feedback import (
    FeedbackDispatcher,
    LoggingCueRenderer,
    LoggingSpeechRenderer,
    SpatialCue,
    SpeechActivity,
)
from interaction.voice import ListeningWindow, mode_from_transcript

__all__ = [
    "AlertDirective",
    "AnnouncementHistory",
    "ArbitrationConfig",
    "Arbitrator",
    "FeedbackDispatcher",
    "ListeningWindow",
    "LoggingCueRenderer",
    "LoggingSpeechRenderer",
    "SpatialCue",
    "SpeechActivity",
    "mode_from_transcript",
]
