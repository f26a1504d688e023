"""Tests for alert arbitration, cooldowns and description rules."""

from __future__ import annotations

import pytest

from interaction.arbitrator import (
    AnnouncementHistory,
    ArbitrationConfig,
    Arbitrator,
    pan_for,
    rank_candidates,
)
from interaction.phrases import PORTUGUESE, describe
from vision.classifier import classify
from vision.detections import DetectionStatus, EnrichedDetection, RawDetection, RiskLevel
from vision.modes import DEFAULT_PROFILES, OperatingMode

OUTDOOR = DEFAULT_PROFILES[OperatingMode.OUTDOOR]
INDOOR = DEFAULT_PROFILES[OperatingMode.INDOOR]


def _enriched(
    label: str,
    *,
    status: DetectionStatus = DetectionStatus.CERTAIN,
    risk: RiskLevel = RiskLevel.LOW,
    critical: bool = False,
    floor: bool = False,
    center_ratio: float = 0.5,
) -> EnrichedDetection:
    return EnrichedDetection(
        detection=RawDetection(label=label, score=0.9, bbox=(0.0, 0.0, 10.0, 10.0)),
        status=status,
        risk=risk,
        is_safety_critical=critical,
        is_floor_barrier=floor,
        area_ratio=0.2,
        center_ratio=center_ratio,
    )


def _traffic_light_frame() -> list[EnrichedDetection]:
    raw = [RawDetection(label="traffic light", score=0.9, bbox=(300.0, 100.0, 40.0, 80.0))]
    return classify(raw, OUTDOOR, 640, 480)


def test_selects_critical_high_risk_over_low_risk() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()
    detections = [
        _enriched("chair", risk=RiskLevel.LOW),
        _enriched("car", risk=RiskLevel.HIGH, critical=True),
    ]

    directive = arbitrator.arbitrate(detections, OUTDOOR, history, 0)

    assert directive is not None
    assert directive.label == "car"
    assert directive.priority is True
    assert directive.risk is RiskLevel.HIGH


def test_uncertain_and_unknown_are_never_announced() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()
    detections = [
        _enriched("car", status=DetectionStatus.UNCERTAIN, critical=True),
        _enriched("dog", status=DetectionStatus.UNKNOWN),
    ]

    assert arbitrator.arbitrate(detections, OUTDOOR, history, 0) is None
    assert history.last_global_ms is None
    assert history.last_by_label == {}


def test_ranking_is_stable_for_equal_priority() -> None:
    detections = [
        _enriched("person", risk=RiskLevel.MEDIUM),
        _enriched("dog", risk=RiskLevel.MEDIUM),
        _enriched("bicycle", risk=RiskLevel.HIGH),
        _enriched("cat", risk=RiskLevel.MEDIUM),
    ]

    ranked = rank_candidates(detections)

    assert [item.label for item in ranked] == ["bicycle", "person", "dog", "cat"]


def test_critical_outranks_higher_risk() -> None:
    detections = [
        _enriched("bicycle", risk=RiskLevel.HIGH),
        _enriched("box", risk=RiskLevel.LOW, critical=True, floor=True),
    ]

    assert rank_candidates(detections)[0].label == "box"


def test_traffic_light_end_to_end_cooldowns() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()

    first = arbitrator.arbitrate(_traffic_light_frame(), OUTDOOR, history, 0)
    assert first is not None
    assert first.text == "Traffic light ahead."
    assert first.priority is True
    assert first.pan_value == pytest.approx(0.0)
    assert history.last_by_label["traffic light"] == 0
    assert history.last_global_ms == 0

    assert arbitrator.arbitrate(_traffic_light_frame(), OUTDOOR, history, 2000) is None
    assert history.last_global_ms == 0

    third = arbitrator.arbitrate(_traffic_light_frame(), OUTDOOR, history, 11000)
    assert third is not None
    assert history.last_by_label["traffic light"] == 11000
    assert history.last_global_ms == 11000


def test_global_cooldown_applies_across_classes() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()

    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 0) is not None
    assert arbitrator.arbitrate([_enriched("chair")], INDOOR, history, 3499) is None
    assert arbitrator.arbitrate([_enriched("chair")], INDOOR, history, 3500) is not None


def test_per_class_cooldown_blocks_repeat_after_global_elapsed() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()

    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 0) is not None
    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 9999) is None
    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 10000) is not None


def test_suppressed_best_does_not_fall_through_to_next_candidate() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory(last_by_label={"car": 0}, last_global_ms=0)
    detections = [_enriched("car", risk=RiskLevel.HIGH, critical=True), _enriched("chair")]

    assert arbitrator.arbitrate(detections, OUTDOOR, history, 5000) is None
    assert "chair" not in history.last_by_label


def test_busy_renderer_defers_non_critical_alerts() -> None:
    arbitrator = Arbitrator(busy_probe=lambda: True)
    history = AnnouncementHistory()

    assert arbitrator.arbitrate([_enriched("chair")], INDOOR, history, 0) is None
    assert history.last_global_ms is None

    directive = arbitrator.arbitrate([_enriched("car", critical=True)], OUTDOOR, history, 0)
    assert directive is not None
    assert directive.priority is True


def test_custom_cooldowns_from_config() -> None:
    config = ArbitrationConfig.from_config(
        {"perception": {"arbitration": {"global_cooldown_ms": 100, "per_class_cooldown_ms": 200}}}
    )
    arbitrator = Arbitrator(config)
    history = AnnouncementHistory()

    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 0) is not None
    assert arbitrator.arbitrate([_enriched("chair")], INDOOR, history, 100) is not None
    assert arbitrator.arbitrate([_enriched("person")], INDOOR, history, 200) is not None


def test_directive_history_never_violates_cooldowns() -> None:
    arbitrator = Arbitrator()
    history = AnnouncementHistory()
    labels = ["person", "car", "person", "dog", "car", "person"]
    emitted: list[tuple[int, str]] = []

    for now_ms in range(0, 60000, 250):
        label = labels[(now_ms // 250) % len(labels)]
        directive = arbitrator.arbitrate([_enriched(label)], INDOOR, history, now_ms)
        if directive is not None:
            emitted.append((now_ms, directive.label))

    assert emitted
    for (t1, _), (t2, _) in zip(emitted, emitted[1:]):
        assert t2 - t1 >= 3500
    for label in set(labels):
        times = [t for t, emitted_label in emitted if emitted_label == label]
        for t1, t2 in zip(times, times[1:]):
            assert t2 - t1 >= 10000


def test_pan_value_spans_frame() -> None:
    assert pan_for(_enriched("x", center_ratio=0.0)) == -1.0
    assert pan_for(_enriched("x", center_ratio=0.5)) == 0.0
    assert pan_for(_enriched("x", center_ratio=1.0)) == 1.0
    assert pan_for(_enriched("x", center_ratio=1.4)) == 1.0


@pytest.mark.parametrize(
    ("detection", "profile", "expected"),
    [
        (_enriched("rock", status=DetectionStatus.UNKNOWN), OUTDOOR, "Unknown object in your path"),
        (_enriched("rock", status=DetectionStatus.UNKNOWN), INDOOR, "I could not identify this object"),
        (
            _enriched("traffic light", floor=True, center_ratio=0.2),
            OUTDOOR,
            "Caution: obstacle on the ground on your left.",
        ),
        (_enriched("traffic light", center_ratio=0.9), OUTDOOR, "Traffic light on your right."),
        (_enriched("bus", center_ratio=0.5), OUTDOOR, "Moving vehicle ahead."),
        (_enriched("bus", center_ratio=0.1), OUTDOOR, "bus on your left"),
        (_enriched("car", center_ratio=0.5), INDOOR, "car ahead"),
        (_enriched("dog", status=DetectionStatus.GET_CLOSER, center_ratio=0.5), OUTDOOR, "dog ahead. Get closer."),
        (_enriched("dog", status=DetectionStatus.UNCERTAIN, center_ratio=0.7), OUTDOOR, "It might be dog on your right"),
    ],
)
def test_description_rule_precedence(detection, profile, expected: str) -> None:
    assert describe(detection, profile) == expected


def test_position_zone_edges_follow_pixel_thresholds() -> None:
    assert describe(_enriched("cup", center_ratio=249 / 640), INDOOR) == "cup on your left"
    assert describe(_enriched("cup", center_ratio=250 / 640), INDOOR) == "cup ahead"
    assert describe(_enriched("cup", center_ratio=390 / 640), INDOOR) == "cup ahead"
    assert describe(_enriched("cup", center_ratio=391 / 640), INDOOR) == "cup on your right"


def test_portuguese_phrasing_translates_labels_and_falls_back() -> None:
    assert describe(_enriched("chair", center_ratio=0.1), INDOOR, PORTUGUESE) == "cadeira à esquerda"
    assert describe(_enriched("gizmo", center_ratio=0.5), INDOOR, PORTUGUESE) == "gizmo à frente"
