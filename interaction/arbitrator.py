"""Feedback arbitration: pick at most one alert per cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from core.logging import DecisionLog, logger
from interaction.phrases import PhraseBook, describe, get_phrase_book
from vision.detections import DetectionStatus, EnrichedDetection, RiskLevel
from vision.modes import ModeProfile

ANNOUNCEABLE = frozenset({DetectionStatus.CERTAIN, DetectionStatus.GET_CLOSER})


@dataclass
class AnnouncementHistory:
    """Last announcement time per class label plus the last of any class."""

    last_by_label: dict[str, int] = field(default_factory=dict)
    last_global_ms: int | None = None

    def since_global(self, now_ms: int) -> int | None:
        if self.last_global_ms is None:
            return None
        return now_ms - self.last_global_ms

    def since_label(self, label: str, now_ms: int) -> int | None:
        last = self.last_by_label.get(label)
        if last is None:
            return None
        return now_ms - last

    def record(self, label: str, now_ms: int) -> None:
        """Mark ``label`` and the global slot as announced at ``now_ms``."""

        previous = self.last_by_label.get(label)
        self.last_by_label[label] = now_ms if previous is None else max(previous, now_ms)
        if self.last_global_ms is None:
            self.last_global_ms = now_ms
        else:
            self.last_global_ms = max(self.last_global_ms, now_ms)


@dataclass(frozen=True)
class AlertDirective:
    """What to say and how to spatialize it."""

    text: str
    priority: bool
    pan_value: float
    risk: RiskLevel
    label: str


@dataclass(frozen=True)
class ArbitrationConfig:
    """Cooldowns applied between announcements."""

    global_cooldown_ms: int = 3500
    per_class_cooldown_ms: int = 10000
    locale: str = "en"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ArbitrationConfig":
        perception_cfg = config.get("perception") if isinstance(config, Mapping) else None
        if not isinstance(perception_cfg, Mapping):
            return cls()
        arbitration_cfg = perception_cfg.get("arbitration") or {}
        speech_cfg = perception_cfg.get("speech") or {}
        return cls(
            global_cooldown_ms=int(arbitration_cfg.get("global_cooldown_ms", 3500)),
            per_class_cooldown_ms=int(arbitration_cfg.get("per_class_cooldown_ms", 10000)),
            locale=str(speech_cfg.get("locale", "en")),
        )


def rank_candidates(enriched: Sequence[EnrichedDetection]) -> list[EnrichedDetection]:
    """Return announceable detections, highest priority first.

    Ordering is safety-critical first, then by risk. The sort is stable, so
    detections of equal rank keep detector order and the first seen wins.
    """

    candidates = [item for item in enriched if item.status in ANNOUNCEABLE]
    return sorted(candidates, key=lambda item: (not item.is_safety_critical, -item.risk.rank))


def pan_for(detection: EnrichedDetection) -> float:
    """Map bbox center-x to a stereo pan value in [-1, 1]."""

    pan = detection.center_ratio * 2 - 1
    return max(-1.0, min(1.0, pan))


class Arbitrator:
    """Decide which single alert, if any, fires this cycle."""

    def __init__(
        self,
        config: ArbitrationConfig | None = None,
        *,
        busy_probe: Callable[[], bool] | None = None,
        decision_log: DecisionLog | None = None,
        phrases: PhraseBook | None = None,
    ) -> None:
        self.config = config or ArbitrationConfig()
        self._busy_probe = busy_probe
        self._decision_log = decision_log
        self._phrases = phrases or get_phrase_book(self.config.locale)

    def set_busy_probe(self, busy_probe: Callable[[], bool] | None) -> None:
        self._busy_probe = busy_probe

    def arbitrate(
        self,
        enriched: Sequence[EnrichedDetection],
        mode: ModeProfile,
        history: AnnouncementHistory,
        now_ms: int,
    ) -> AlertDirective | None:
        """Return the directive to emit now, updating ``history`` if one is returned."""

        candidates = rank_candidates(enriched)
        if not candidates:
            return None
        best = candidates[0]

        since_global = history.since_global(now_ms)
        if since_global is not None and since_global < self.config.global_cooldown_ms:
            self._record("suppressed %s: global cooldown (%sms)", best.label, since_global)
            return None

        since_label = history.since_label(best.label, now_ms)
        if since_label is not None and since_label < self.config.per_class_cooldown_ms:
            self._record("suppressed %s: class cooldown (%sms)", best.label, since_label)
            return None

        if not best.is_safety_critical and self._renderer_busy():
            self._record("deferred %s: speech in progress", best.label)
            return None

        directive = AlertDirective(
            text=describe(best, mode, self._phrases),
            priority=best.is_safety_critical,
            pan_value=pan_for(best),
            risk=best.risk,
            label=best.label,
        )
        history.record(best.label, now_ms)
        self._record(
            "announce %s risk=%s priority=%s pan=%.2f: %s",
            best.label,
            best.risk.value,
            directive.priority,
            directive.pan_value,
            directive.text,
        )
        return directive

    def _renderer_busy(self) -> bool:
        if self._busy_probe is None:
            return False
        return bool(self._busy_probe())

    def _record(self, message: str, *args: object) -> None:
        if self._decision_log is not None:
            self._decision_log.add("ARBITRATOR", message, *args)
        else:
            logger.debug("[ARBITRATOR] " + message, *args)
