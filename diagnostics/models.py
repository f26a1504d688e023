"""Result types reported by the perception diagnostics probes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class DiagnosticStatus(str, Enum):
    """Probe outcome, ordered from healthy to broken."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"

    @property
    def severity(self) -> int:
        return {"PASS": 0, "WARN": 1, "FAIL": 2}[self.value]


@dataclass(frozen=True)
class DiagnosticResult:
    """Outcome of probing one subsystem (config, core or vision)."""

    name: str
    status: DiagnosticStatus
    details: str
    elapsed_ms: float | None = None

    @property
    def failed(self) -> bool:
        return self.status is DiagnosticStatus.FAIL


def overall_status(results: Iterable[DiagnosticResult]) -> DiagnosticStatus:
    """Return the most severe status among ``results`` (PASS when empty)."""

    worst = DiagnosticStatus.PASS
    for result in results:
        if result.status.severity > worst.severity:
            worst = result.status
    return worst
