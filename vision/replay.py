"""Detector that replays recorded detections from a YAML file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import yaml

from vision.detections import Frame, RawDetection


class ReplayError(RuntimeError):
    """Raised when a recorded frame is marked as a detector failure."""


def _parse_detection(item: dict[str, Any]) -> RawDetection:
    bbox = item.get("bbox") or (0, 0, 0, 0)
    if len(bbox) != 4:
        raise ValueError(f"bbox must have four values: {bbox!r}")
    return RawDetection(
        label=str(item["label"]),
        score=float(item["score"]),
        bbox=tuple(float(value) for value in bbox),
    )


class ReplayDetector:
    """Serve recorded per-frame detections keyed by ``Frame.frame_id``.

    File format::

        frame_width: 640
        frame_height: 480
        frames:
          - detections:
              - {label: traffic light, score: 0.9, bbox: [300, 100, 40, 80]}
          - fail: true
          - command: switch to indoor
            t_ms: 12000
            detections: []
    """

    def __init__(self, frames: list[dict[str, Any]], frame_width: int = 640, frame_height: int = 480) -> None:
        self._frames = frames
        self.frame_width = frame_width
        self.frame_height = frame_height

    @classmethod
    def from_file(cls, path: Path) -> "ReplayDetector":
        with path.open("r", encoding="utf-8") as file:
            data = yaml.safe_load(file) or {}
        frames = data.get("frames") or []
        if not isinstance(frames, list):
            raise ValueError(f"'frames' must be a list in {path}")
        return cls(
            frames=[dict(entry or {}) for entry in frames],
            frame_width=int(data.get("frame_width", 640)),
            frame_height=int(data.get("frame_height", 480)),
        )

    def __len__(self) -> int:
        return len(self._frames)

    def frames(self) -> Iterator[Frame]:
        for index in range(len(self._frames)):
            yield Frame(width=self.frame_width, height=self.frame_height, frame_id=index)

    def timestamp_for(self, frame: Frame) -> int | None:
        """Return the recorded ``t_ms`` of a frame, if any."""

        entry = self._entry(frame)
        if entry is None or entry.get("t_ms") is None:
            return None
        return int(entry["t_ms"])

    def command_for(self, frame: Frame) -> str | None:
        """Return a voice transcript recorded just before a frame, if any."""

        entry = self._entry(frame)
        if entry is None or not entry.get("command"):
            return None
        return str(entry["command"])

    def _entry(self, frame: Frame) -> dict[str, Any] | None:
        index = frame.frame_id or 0
        if index >= len(self._frames):
            return None
        return self._frames[index]

    def detect(self, frame: Frame) -> list[RawDetection]:
        entry = self._entry(frame)
        if entry is None:
            return []
        if entry.get("fail"):
            raise ReplayError(f"recorded detector failure at frame {frame.frame_id}")
        return [_parse_detection(item) for item in entry.get("detections") or []]
