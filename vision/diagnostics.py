"""Diagnostics routines for the perception subsystem."""

from __future__ import annotations

from typing import Any, Mapping

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from vision.classifier import classify
from vision.detections import DetectionStatus, RawDetection
from vision.modes import ModeController, OperatingMode


def probe(config: Mapping[str, Any] | None = None) -> DiagnosticResult:
    """Build every mode profile and classify a synthetic frame in each.

    Args:
        config: Optional configuration mapping; defaults to the loaded config.

    Returns:
        Diagnostic result indicating perception readiness.
    """

    name = "vision"
    try:
        if config is None:
            from config import ConfigController

            config = ConfigController.get_instance().get_config()
        controller = ModeController.from_config(config)
    except (OSError, ValueError, TypeError) as exc:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Mode profiles invalid: {exc}",
        )

    sample = RawDetection(label="person", score=0.9, bbox=(200.0, 100.0, 240.0, 300.0))
    empty_modes: list[str] = []
    for mode in OperatingMode:
        profile = controller.profile(mode)
        if not profile.allow_labels:
            empty_modes.append(mode.value)
        enriched = classify([sample], profile, 640, 480)
        if enriched and enriched[0].status is not DetectionStatus.CERTAIN:
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"Unexpected status {enriched[0].status.value} in {mode.value}",
            )

    if empty_modes:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Modes with empty allow-list: {', '.join(empty_modes)}",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"{len(OperatingMode)} mode profiles ready (default {controller.current().value})",
    )
