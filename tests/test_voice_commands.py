"""Tests for voice command keywords and the listening window."""

from __future__ import annotations

import pytest

from interaction.voice import ListeningWindow, mode_from_transcript
from vision.modes import OperatingMode


@pytest.mark.parametrize(
    ("transcript", "expected"),
    [
        ("switch to indoor mode", OperatingMode.INDOOR),
        ("I'm going OUTSIDE now", OperatingMode.OUTDOOR),
        ("please read this", OperatingMode.READING),
        ("modo leitura", OperatingMode.READING),
        ("estou na rua", OperatingMode.OUTDOOR),
        ("voltei para casa", OperatingMode.INDOOR),
        ("what time is it", None),
        ("   ", None),
        ("readings", None),
    ],
)
def test_mode_from_transcript(transcript: str, expected: OperatingMode | None) -> None:
    assert mode_from_transcript(transcript) is expected


def test_window_resolves_command_while_open() -> None:
    window = ListeningWindow()

    assert window.open(1000) is True
    assert window.open(1500) is False
    assert window.resolve("indoor", 4000) is OperatingMode.INDOOR
    assert window.is_listening(4000) is False


def test_window_times_out_after_five_seconds() -> None:
    window = ListeningWindow()
    window.open(0)

    assert window.is_listening(4999) is True
    assert window.resolve("indoor", 5000) is None
    assert window.is_listening(5001) is False


def test_unmatched_transcript_closes_window() -> None:
    window = ListeningWindow(timeout_ms=100)
    window.open(0)

    assert window.resolve("banana", 50) is None
    assert window.open(60) is True
