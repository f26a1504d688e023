"""Detection schemas for the perception pipeline.

Bounding boxes are expressed in source-frame pixels as
``(x, y, width, height)``. Enriched detections additionally carry the
normalized geometry (``area_ratio`` and ``center_ratio``) computed against the
frame they were classified in, so downstream consumers never need the raw
frame dimensions again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DetectionStatus(str, Enum):
    """Confidence-derived status of a detection."""

    CERTAIN = "certain"
    UNCERTAIN = "uncertain"
    UNKNOWN = "unknown"
    GET_CLOSER = "get_closer"


class RiskLevel(str, Enum):
    """Coarse danger tier of an object class."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 1, RiskLevel.MEDIUM: 2, RiskLevel.HIGH: 3}


@dataclass(frozen=True)
class RawDetection:
    """Single object detection as reported by the detector."""

    label: str
    score: float
    bbox: tuple[float, float, float, float]

    @property
    def center_x(self) -> float:
        x, _, width, _ = self.bbox
        return x + width / 2


@dataclass(frozen=True)
class EnrichedDetection:
    """Raw detection plus the semantics assigned by the classifier."""

    detection: RawDetection
    status: DetectionStatus
    risk: RiskLevel
    is_safety_critical: bool
    is_floor_barrier: bool
    area_ratio: float
    center_ratio: float

    @property
    def label(self) -> str:
        return self.detection.label

    @property
    def score(self) -> float:
        return self.detection.score

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        return self.detection.bbox


@dataclass(frozen=True)
class Frame:
    """Frame handed to the detector together with its geometry."""

    width: int
    height: int
    image: Any = None
    frame_id: int | None = None
