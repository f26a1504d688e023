"""Detection cycle engine and the loop that schedules it."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
import time
from typing import Any, Callable, Mapping, Protocol, Sequence

from core.logging import DecisionLog, logger
from interaction.arbitrator import AlertDirective, AnnouncementHistory, ArbitrationConfig, Arbitrator
from interaction.feedback import FeedbackDispatcher, LoggingCueRenderer, LoggingSpeechRenderer
from interaction.phrases import get_phrase_book
from vision.classifier import classify
from vision.detections import EnrichedDetection, Frame, RawDetection
from vision.modes import ModeController, ModeTrigger, OperatingMode
from vision.sampler import AdaptiveSampler, SamplerConfig


def millis() -> int:
    return int(time.monotonic() * 1000)


class Detector(Protocol):
    """Object detector collaborator."""

    def detect(self, frame: Frame) -> Sequence[RawDetection]:
        """Return raw detections for ``frame``; may raise on failure."""


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one detect, classify, arbitrate and sample pass."""

    detections: list[EnrichedDetection] = field(default_factory=list)
    directive: AlertDirective | None = None
    interval_ms: int = 0
    skipped: bool = False
    reason: str = ""


class PerceptionEngine:
    """Runs one perception cycle at a time.

    Cycles are serialized by a non-blocking lock: a call that arrives while
    another cycle is still running is rejected as skipped. Mode changes wait
    for the running cycle so the mode only changes between cycles.
    """

    def __init__(
        self,
        detector: Detector,
        *,
        modes: ModeController | None = None,
        sampler: AdaptiveSampler | None = None,
        arbitrator: Arbitrator | None = None,
        feedback: FeedbackDispatcher | None = None,
        decision_log: DecisionLog | None = None,
        clock: Callable[[], int] = millis,
    ) -> None:
        self.detector = detector
        self.modes = modes or ModeController()
        self.sampler = sampler or AdaptiveSampler()
        self.decision_log = decision_log or DecisionLog()
        self.feedback = feedback or FeedbackDispatcher(LoggingSpeechRenderer(), LoggingCueRenderer())
        self.arbitrator = arbitrator or Arbitrator(decision_log=self.decision_log)
        self.arbitrator.set_busy_probe(self.feedback.is_busy)
        self.history = AnnouncementHistory()
        self._clock = clock
        self._cycle_lock = threading.Lock()
        self._last_detections: list[EnrichedDetection] = []

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        detector: Detector,
        feedback: FeedbackDispatcher | None = None,
        clock: Callable[[], int] = millis,
    ) -> "PerceptionEngine":
        perception_cfg = config.get("perception") if isinstance(config, Mapping) else None
        log_size = 11
        if isinstance(perception_cfg, Mapping):
            log_size = int(perception_cfg.get("debug_log_size", 11))
        decision_log = DecisionLog(maxlen=log_size)
        arbitration_config = ArbitrationConfig.from_config(config)
        return cls(
            detector,
            modes=ModeController.from_config(config),
            sampler=AdaptiveSampler(SamplerConfig.from_config(config)),
            arbitrator=Arbitrator(arbitration_config, decision_log=decision_log),
            feedback=feedback,
            decision_log=decision_log,
            clock=clock,
        )

    @property
    def last_detections(self) -> list[EnrichedDetection]:
        return list(self._last_detections)

    def run_cycle(self, frame: Frame, now_ms: int | None = None) -> CycleResult:
        """Run one full cycle for ``frame``; never raises for detector failures."""

        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("[ENGINE] cycle already running; skipping re-entrant call")
            return CycleResult(interval_ms=self.sampler.interval_ms, skipped=True, reason="busy")
        try:
            profile = self.modes.profile()
            try:
                raw = self.detector.detect(frame)
            except Exception as exc:
                logger.warning("[ENGINE] detector failed, skipping cycle: %s", exc)
                self.decision_log.add("ENGINE", "detector failed: %s", exc)
                return CycleResult(
                    interval_ms=self.sampler.interval_ms,
                    skipped=True,
                    reason="detector_failed",
                )
            if raw is None:
                self.decision_log.add("ENGINE", "detector returned nothing")
                return CycleResult(
                    interval_ms=self.sampler.interval_ms,
                    skipped=True,
                    reason="no_result",
                )

            enriched = classify(raw, profile, frame.width, frame.height)
            self.decision_log.add(
                "CLASSIFIER",
                "%s: %s",
                profile.mode.value,
                ", ".join(f"{item.label}/{item.status.value}/{item.risk.value}" for item in enriched)
                or "nothing relevant",
            )

            now = self._clock() if now_ms is None else now_ms
            directive = self.arbitrator.arbitrate(enriched, profile, self.history, now)
            if directive is not None:
                self.feedback.dispatch(directive)

            interval_ms = self.sampler.update(enriched)
            self._last_detections = enriched
            return CycleResult(detections=enriched, directive=directive, interval_ms=interval_ms)
        finally:
            self._cycle_lock.release()

    def change_mode(self, trigger: ModeTrigger) -> OperatingMode:
        """Apply a mode trigger between cycles and announce the new mode."""

        with self._cycle_lock:
            previous = self.modes.current()
            mode = self.modes.transition(trigger)
        if mode is not previous:
            phrases = get_phrase_book(self.arbitrator.config.locale)
            self.feedback.announce(phrases.mode_activated[mode], interrupt=True)
            self.decision_log.add("MODE", "%s -> %s", previous.value, mode.value)
        return mode


class PerceptionLoop:
    """Background scheduler: run a cycle, then wait the sampler's interval."""

    def __init__(
        self,
        engine: PerceptionEngine,
        frame_source: Callable[[], Frame | None],
        on_result: Callable[[CycleResult], None] | None = None,
    ) -> None:
        self.engine = engine
        self.frame_source = frame_source
        self.on_result = on_result
        self.cycle_count = 0
        self._stop_event = threading.Event()
        self._paused = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._loop, daemon=True)
            self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("[ENGINE] Perception loop did not stop within timeout")
            return
        self._thread = None
        logger.info("[ENGINE] Perception loop stopped after %s cycles", self.cycle_count)

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def is_paused(self) -> bool:
        return self._paused.is_set()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def step(self) -> CycleResult | None:
        """Run a single cycle unless paused; returns None when nothing ran."""

        if self._paused.is_set():
            return None
        frame = self.frame_source()
        if frame is None:
            return None
        self.cycle_count += 1
        result = self.engine.run_cycle(frame)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            interval_ms = self.engine.sampler.interval_ms
            try:
                result = self.step()
                if result is not None:
                    interval_ms = result.interval_ms
            except Exception as exc:
                logger.exception("[ENGINE] Error in perception loop (retrying): %s", exc)
            # A zero interval still yields so stop() is honored promptly.
            self._stop_event.wait(max(interval_ms, 1) / 1000.0)
