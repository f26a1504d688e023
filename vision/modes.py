"""Operating modes and the controller that cycles between them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

from core.logging import logger
from vision.labels import INDOOR_LABELS, STREET_LABELS


class OperatingMode(str, Enum):
    """Closed set of operating profiles."""

    OUTDOOR = "outdoor"
    INDOOR = "indoor"
    READING = "reading"

    @classmethod
    def parse(cls, value: "str | OperatingMode") -> "OperatingMode":
        if isinstance(value, OperatingMode):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(f"Unknown operating mode: {value!r}")


@dataclass(frozen=True)
class ModeProfile:
    """Thresholds and allow-list attached to one operating mode.

    Attributes:
        mode: Mode this profile belongs to.
        allow_labels: Class labels relevant in this mode.
        low_confidence_floor: When set, detections scoring below it are kept
            regardless of label, since an unclassified blob may be an obstacle.
        floor_bottom_ratio: Fraction of frame height the bbox bottom edge must
            exceed for the detection to count as on the floor.
        center_band: Horizontal band, as fractions of frame width, that the
            bbox center must fall strictly inside to count as centered.
        vehicle_rules: Whether vehicles and traffic signs are safety-critical.
        floor_rules: Whether the floor/obstacle test applies at all.
    """

    mode: OperatingMode
    allow_labels: frozenset[str]
    low_confidence_floor: float | None = None
    floor_bottom_ratio: float = 0.75
    center_band: tuple[float, float] = (0.30, 0.70)
    vehicle_rules: bool = False
    floor_rules: bool = False

    def allows(self, label: str, score: float) -> bool:
        if label in self.allow_labels:
            return True
        return self.low_confidence_floor is not None and score < self.low_confidence_floor


DEFAULT_PROFILES: dict[OperatingMode, ModeProfile] = {
    OperatingMode.OUTDOOR: ModeProfile(
        mode=OperatingMode.OUTDOOR,
        allow_labels=frozenset(STREET_LABELS),
        low_confidence_floor=0.3,
        floor_bottom_ratio=0.70,
        center_band=(0.25, 0.75),
        vehicle_rules=True,
        floor_rules=True,
    ),
    OperatingMode.INDOOR: ModeProfile(
        mode=OperatingMode.INDOOR,
        allow_labels=frozenset(INDOOR_LABELS),
    ),
    OperatingMode.READING: ModeProfile(
        mode=OperatingMode.READING,
        allow_labels=frozenset(INDOOR_LABELS),
    ),
}

CYCLE_ORDER = (OperatingMode.OUTDOOR, OperatingMode.INDOOR, OperatingMode.READING)


def build_profiles(modes_cfg: Mapping[str, Any] | None) -> dict[OperatingMode, ModeProfile]:
    """Return mode profiles with per-mode overrides from config applied."""

    profiles = dict(DEFAULT_PROFILES)
    if not isinstance(modes_cfg, Mapping):
        return profiles
    for name, overrides in modes_cfg.items():
        mode = OperatingMode.parse(name)
        if not isinstance(overrides, Mapping):
            continue
        profile = profiles[mode]
        updates: dict[str, Any] = {}
        if "allow_labels" in overrides:
            updates["allow_labels"] = frozenset(str(item) for item in overrides["allow_labels"] or ())
        if "low_confidence_floor" in overrides:
            floor = overrides["low_confidence_floor"]
            updates["low_confidence_floor"] = float(floor) if floor is not None else None
        if "floor_bottom_ratio" in overrides:
            updates["floor_bottom_ratio"] = float(overrides["floor_bottom_ratio"])
        if "center_band" in overrides:
            try:
                low, high = (float(value) for value in overrides["center_band"])
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"center_band for {mode.value} must be two numbers: {overrides['center_band']!r}"
                ) from exc
            if low >= high:
                raise ValueError(f"center_band for {mode.value} must be increasing: {low}, {high}")
            updates["center_band"] = (low, high)
        if "vehicle_rules" in overrides:
            updates["vehicle_rules"] = bool(overrides["vehicle_rules"])
        if "floor_rules" in overrides:
            updates["floor_rules"] = bool(overrides["floor_rules"])
        profiles[mode] = replace(profile, **updates)
    return profiles


@dataclass(frozen=True)
class ModeTrigger:
    """Request to change mode: either advance the cycle or select a target."""

    target: OperatingMode | None = None
    source: str = "manual"

    @classmethod
    def advance(cls, source: str = "manual") -> "ModeTrigger":
        return cls(target=None, source=source)

    @classmethod
    def select(cls, target: "OperatingMode | str", source: str = "voice") -> "ModeTrigger":
        return cls(target=OperatingMode.parse(target), source=source)


class ModeController:
    """Holds the active operating mode and its profile."""

    def __init__(
        self,
        initial: OperatingMode = OperatingMode.OUTDOOR,
        profiles: Mapping[OperatingMode, ModeProfile] | None = None,
    ) -> None:
        self._profiles = dict(profiles) if profiles is not None else dict(DEFAULT_PROFILES)
        missing = [mode.value for mode in OperatingMode if mode not in self._profiles]
        if missing:
            raise ValueError(f"Missing mode profiles: {', '.join(missing)}")
        self._mode = initial

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ModeController":
        perception_cfg = config.get("perception") if isinstance(config, Mapping) else None
        if not isinstance(perception_cfg, Mapping):
            return cls()
        initial = OperatingMode.parse(perception_cfg.get("default_mode", OperatingMode.OUTDOOR))
        return cls(initial=initial, profiles=build_profiles(perception_cfg.get("modes")))

    def current(self) -> OperatingMode:
        return self._mode

    def profile(self, mode: OperatingMode | None = None) -> ModeProfile:
        """Return the profile for ``mode`` or for the active mode."""

        return self._profiles[mode if mode is not None else self._mode]

    def transition(self, trigger: ModeTrigger) -> OperatingMode:
        """Apply a trigger and return the resulting mode."""

        if trigger.target is None:
            index = CYCLE_ORDER.index(self._mode)
            new_mode = CYCLE_ORDER[(index + 1) % len(CYCLE_ORDER)]
        else:
            new_mode = trigger.target

        if new_mode is self._mode:
            logger.debug("[MODE] %s unchanged (%s)", self._mode.value, trigger.source)
            return self._mode

        old_mode = self._mode
        self._mode = new_mode
        logger.info("[MODE] %s -> %s (%s)", old_mode.value, new_mode.value, trigger.source)
        return self._mode
