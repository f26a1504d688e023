"""Run perception probes and render their report."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
import time

from core.logging import logger as LOGGER
from diagnostics.models import DiagnosticResult, DiagnosticStatus, overall_status


def format_results(results: Iterable[DiagnosticResult]) -> str:
    """Return the report printed by ``--diagnostics``."""

    results = list(results)
    lines = ["Perception diagnostics", "-" * 60]
    for result in results:
        timing = f" ({result.elapsed_ms:.1f}ms)" if result.elapsed_ms is not None else ""
        lines.append(f"[{result.status.value}] {result.name}: {result.details}{timing}")
    lines.append("-" * 60)
    failed = sum(1 for result in results if result.failed)
    lines.append(f"{len(results)} probes, {failed} failed, overall {overall_status(results).value}")
    return "\n".join(lines)


def exit_code(results: Iterable[DiagnosticResult]) -> int:
    return 1 if overall_status(results) is DiagnosticStatus.FAIL else 0


def run_diagnostics(probes: Iterable[Callable[[], DiagnosticResult]]) -> list[DiagnosticResult]:
    """Run each probe in turn; a probe that raises is reported as FAIL."""

    results: list[DiagnosticResult] = []
    for probe in probes:
        started = time.monotonic()
        try:
            result = probe()
        except Exception as exc:  # noqa: BLE001 - diagnostics must keep running
            LOGGER.exception("[DIAG] probe %s raised", getattr(probe, "__name__", probe))
            result = DiagnosticResult(
                name=getattr(probe, "__name__", "unknown_probe"),
                status=DiagnosticStatus.FAIL,
                details=f"Probe raised exception: {exc}",
            )
        results.append(replace(result, elapsed_ms=(time.monotonic() - started) * 1000.0))
    return results
