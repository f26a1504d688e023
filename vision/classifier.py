"""Per-frame classification of raw detections.

The classifier is a pure function of its inputs: the same detections, mode
profile and frame size always produce the same enriched detections.
"""

from __future__ import annotations

from typing import Iterable

from vision.detections import DetectionStatus, EnrichedDetection, RawDetection
from vision.labels import HIGH_SALIENCE_LABELS, classify_risk
from vision.modes import ModeProfile

CERTAIN_SCORE = 0.6
UNCERTAIN_SCORE = 0.4
GET_CLOSER_AREA = 0.05


def status_for_score(score: float) -> DetectionStatus:
    """Band a detector score into a status; each band is closed below."""

    if score >= CERTAIN_SCORE:
        return DetectionStatus.CERTAIN
    if score >= UNCERTAIN_SCORE:
        return DetectionStatus.UNCERTAIN
    return DetectionStatus.UNKNOWN


def _ratio(value: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return value / total


def classify_detection(
    detection: RawDetection,
    profile: ModeProfile,
    frame_width: float,
    frame_height: float,
) -> EnrichedDetection:
    """Enrich a single detection that already passed the relevance filter."""

    x, y, width, height = detection.bbox
    status = status_for_score(detection.score)

    area_ratio = _ratio(width, frame_width) * _ratio(height, frame_height)
    if area_ratio < GET_CLOSER_AREA and status is not DetectionStatus.UNKNOWN:
        status = DetectionStatus.GET_CLOSER

    center_ratio = detection.center_x / frame_width if frame_width > 0 else 0.5
    band_low, band_high = profile.center_band
    on_floor = frame_height > 0 and (y + height) > frame_height * profile.floor_bottom_ratio
    centered = frame_width > 0 and band_low < center_ratio < band_high
    is_floor_barrier = profile.floor_rules and on_floor and centered

    salient = profile.vehicle_rules and detection.label in HIGH_SALIENCE_LABELS

    return EnrichedDetection(
        detection=detection,
        status=status,
        risk=classify_risk(detection.label),
        is_safety_critical=salient or is_floor_barrier,
        is_floor_barrier=is_floor_barrier,
        area_ratio=area_ratio,
        center_ratio=center_ratio,
    )


def classify(
    detections: Iterable[RawDetection],
    profile: ModeProfile,
    frame_width: float,
    frame_height: float,
) -> list[EnrichedDetection]:
    """Filter detections for the active mode and enrich the survivors.

    Args:
        detections: Raw detections for one frame, in detector order.
        profile: Profile of the active operating mode.
        frame_width: Source frame width, in the bbox coordinate space.
        frame_height: Source frame height, in the bbox coordinate space.

    Returns:
        Enriched detections, preserving detector order.
    """

    return [
        classify_detection(detection, profile, frame_width, frame_height)
        for detection in detections
        if profile.allows(detection.label, detection.score)
    ]
