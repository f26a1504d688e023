"""Application runtime entry points and lifecycle helpers."""

from __future__ import annotations

from dataclasses import dataclass
import threading
from pathlib import Path
from typing import Any, Iterator, Mapping

from core.engine import CycleResult, PerceptionEngine, PerceptionLoop, millis
from core.logging import logger
from interaction.feedback import FeedbackDispatcher, LoggingCueRenderer, LoggingSpeechRenderer
from interaction.voice import ListeningWindow
from vision.detections import Frame
from vision.modes import ModeTrigger
from vision.replay import ReplayDetector


@dataclass(frozen=True)
class ReplayConfig:
    """Options for replaying recorded detections.

    Attributes:
        path: YAML file with recorded frames.
        realtime: Honor sampler intervals with the background loop instead of
            advancing a simulated clock.
        min_step_ms: Smallest simulated time step between frames.
    """

    path: Path
    realtime: bool = False
    min_step_ms: int = 100


class RecordedClock:
    """Replay time in ms: the last recorded ``t_ms`` plus wall time since it."""

    def __init__(self) -> None:
        self._base_ms = 0
        self._anchor_ms = millis()

    def set(self, t_ms: int) -> None:
        self._base_ms = t_ms
        self._anchor_ms = millis()

    def __call__(self) -> int:
        return self._base_ms + millis() - self._anchor_ms


def _apply_command(
    engine: PerceptionEngine,
    listening: ListeningWindow,
    transcript: str | None,
    now_ms: int,
) -> None:
    if transcript is None:
        return
    listening.open(now_ms)
    mode = listening.resolve(transcript, now_ms)
    if mode is not None:
        engine.change_mode(ModeTrigger.select(mode))


def _simulated_cycles(
    engine: PerceptionEngine,
    detector: ReplayDetector,
    min_step_ms: int,
) -> Iterator[tuple[int, CycleResult]]:
    listening = ListeningWindow()
    now_ms = 0
    for frame in detector.frames():
        recorded = detector.timestamp_for(frame)
        if recorded is not None:
            now_ms = recorded
        _apply_command(engine, listening, detector.command_for(frame), now_ms)
        result = engine.run_cycle(frame, now_ms=now_ms)
        yield now_ms, result
        now_ms += max(result.interval_ms, min_step_ms)



def run_replay(
    replay: ReplayConfig,
    config: Mapping[str, Any],
    feedback: FeedbackDispatcher | None = None,
) -> list[CycleResult]:
    """Replay recorded detections through the engine.

    Args:
        replay: Replay options.
        config: Loaded configuration mapping.
        feedback: Optional dispatcher; defaults to logging renderers.

    Returns:
        Cycle results in frame order.
    """

    detector = ReplayDetector.from_file(replay.path)
    feedback = feedback or FeedbackDispatcher(LoggingSpeechRenderer(), LoggingCueRenderer())
    clock = RecordedClock()
    engine = PerceptionEngine.from_config(config, detector, feedback=feedback, clock=clock)
    logger.info(
        "Replaying %s frames from %s in %s mode",
        len(detector),
        replay.path,
        engine.modes.current().value,
    )

    if not replay.realtime:
        results: list[CycleResult] = []
        for now_ms, result in _simulated_cycles(engine, detector, replay.min_step_ms):
            if result.directive is not None:
                logger.info("t=%sms -> %s", now_ms, result.directive.text)
            results.append(result)
        return results

    frames = iter(list(detector.frames()))
    listening = ListeningWindow()
    done = threading.Event()
    collected: list[CycleResult] = []

    def next_frame() -> Frame | None:
        frame = next(frames, None)
        if frame is None:
            done.set()
            return None
        recorded = detector.timestamp_for(frame)
        if recorded is not None:
            clock.set(recorded)
        _apply_command(engine, listening, detector.command_for(frame), clock())
        return frame

    loop = PerceptionLoop(engine, next_frame, on_result=collected.append)
    loop.start()
    try:
        done.wait()
    finally:
        loop.stop()
    return collected
