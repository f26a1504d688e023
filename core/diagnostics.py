"""Diagnostics routines for the core subsystem."""

from __future__ import annotations

import importlib.util

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe() -> DiagnosticResult:
    """Check that the runtime logger and the decision trail are usable."""

    name = "core"
    from core import logging as core_logging

    if core_logging.logger is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Core logger failed to initialize",
        )

    trail = core_logging.DecisionLog(maxlen=2)
    for index in range(3):
        trail.add("DIAG", "entry %s", index)
    if len(trail) != 2:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Decision log kept {len(trail)} entries, expected 2",
        )

    if importlib.util.find_spec("rich") is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details="Rich logging not available (plain stream handler)",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Rich logging enabled; decision log bounded",
    )
