"""Tests for the adaptive sampling tiers."""

from __future__ import annotations

from vision.detections import DetectionStatus, EnrichedDetection, RawDetection, RiskLevel
from vision.sampler import AdaptiveSampler, SamplerConfig, SamplerState, SamplerTier, next_state


def _detection(critical: bool = False) -> EnrichedDetection:
    return EnrichedDetection(
        detection=RawDetection(label="car", score=0.9, bbox=(0.0, 0.0, 100.0, 100.0)),
        status=DetectionStatus.CERTAIN,
        risk=RiskLevel.HIGH,
        is_safety_critical=critical,
        is_floor_barrier=False,
        area_ratio=0.1,
        center_ratio=0.5,
    )


def test_initial_interval_before_any_cycle() -> None:
    assert AdaptiveSampler().interval_ms == 100


def test_critical_detection_resets_counter_and_runs_fastest() -> None:
    state = SamplerState(tier=SamplerTier.DORMANT, empty_count=11, interval_ms=1000)

    result = next_state(state, [_detection(), _detection(critical=True)])

    assert result.interval_ms == 0
    assert result.empty_count == 0
    assert result.tier is SamplerTier.CRITICAL


def test_non_critical_detections_use_active_interval() -> None:
    result = next_state(SamplerState(empty_count=4), [_detection()])

    assert result.interval_ms == 300
    assert result.empty_count == 0


def test_empty_cycles_slow_down_after_ten() -> None:
    sampler = AdaptiveSampler()

    intervals = [sampler.update([]) for _ in range(11)]

    assert intervals[:10] == [500] * 10
    assert intervals[10] == 1000
    assert sampler.state.empty_count == 11


def test_empty_counter_saturates() -> None:
    sampler = AdaptiveSampler(SamplerConfig(empty_slow_after=3))

    for _ in range(50):
        sampler.update([])

    assert sampler.state.empty_count == 4
    assert sampler.state.tier is SamplerTier.DORMANT
    assert sampler.update([_detection()]) == 300


def test_config_overrides_intervals() -> None:
    config = SamplerConfig.from_config({"perception": {"sampler": {"active_ms": 250, "idle_ms": 700}}})
    sampler = AdaptiveSampler(config)

    assert sampler.update([_detection()]) == 250
    assert sampler.update([]) == 700
    assert config.dormant_ms == 1000
