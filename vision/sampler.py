"""Adaptive sampling policy for the detection loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from core.logging import logger
from vision.detections import EnrichedDetection


class SamplerTier(str, Enum):
    """Sampling tiers, fastest first."""

    CRITICAL = "critical"
    ACTIVE = "active"
    IDLE = "idle"
    DORMANT = "dormant"


@dataclass(frozen=True)
class SamplerConfig:
    """Interval per tier and the empty-frame threshold for going dormant."""

    critical_ms: int = 0
    active_ms: int = 300
    idle_ms: int = 500
    dormant_ms: int = 1000
    empty_slow_after: int = 10
    initial_ms: int = 100

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "SamplerConfig":
        perception_cfg = config.get("perception") if isinstance(config, Mapping) else None
        sampler_cfg = perception_cfg.get("sampler") if isinstance(perception_cfg, Mapping) else None
        if not isinstance(sampler_cfg, Mapping):
            return cls()
        return cls(
            critical_ms=int(sampler_cfg.get("critical_ms", 0)),
            active_ms=int(sampler_cfg.get("active_ms", 300)),
            idle_ms=int(sampler_cfg.get("idle_ms", 500)),
            dormant_ms=int(sampler_cfg.get("dormant_ms", 1000)),
            empty_slow_after=int(sampler_cfg.get("empty_slow_after", 10)),
            initial_ms=int(sampler_cfg.get("initial_ms", 100)),
        )

    def interval_for(self, tier: SamplerTier) -> int:
        return {
            SamplerTier.CRITICAL: self.critical_ms,
            SamplerTier.ACTIVE: self.active_ms,
            SamplerTier.IDLE: self.idle_ms,
            SamplerTier.DORMANT: self.dormant_ms,
        }[tier]


@dataclass(frozen=True)
class SamplerState:
    """Current tier and the count of consecutive empty cycles."""

    tier: SamplerTier = SamplerTier.ACTIVE
    empty_count: int = 0
    interval_ms: int = 100


def next_state(
    state: SamplerState,
    detections: Sequence[EnrichedDetection],
    config: SamplerConfig = SamplerConfig(),
) -> SamplerState:
    """Return the sampler state after a cycle with ``detections``."""

    if any(item.is_safety_critical for item in detections):
        tier = SamplerTier.CRITICAL
        empty_count = 0
    elif detections:
        tier = SamplerTier.ACTIVE
        empty_count = 0
    else:
        # Saturates one past the threshold; the tier cannot change beyond it.
        empty_count = min(state.empty_count + 1, config.empty_slow_after + 1)
        if empty_count > config.empty_slow_after:
            tier = SamplerTier.DORMANT
        else:
            tier = SamplerTier.IDLE
    return SamplerState(tier=tier, empty_count=empty_count, interval_ms=config.interval_for(tier))


class AdaptiveSampler:
    """Owns the sampler state and advances it once per cycle."""

    def __init__(self, config: SamplerConfig | None = None) -> None:
        self.config = config or SamplerConfig()
        self._state = SamplerState(interval_ms=self.config.initial_ms)

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def interval_ms(self) -> int:
        return self._state.interval_ms

    def update(self, detections: Sequence[EnrichedDetection]) -> int:
        """Advance the state machine and return the next interval in ms."""

        previous = self._state
        self._state = next_state(previous, detections, self.config)
        if previous.tier is not self._state.tier:
            logger.debug(
                "[SAMPLER] %s -> %s interval=%sms empty=%s",
                previous.tier.value,
                self._state.tier.value,
                self._state.interval_ms,
                self._state.empty_count,
            )
        return self._state.interval_ms
