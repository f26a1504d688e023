"""Startup probes for the perception runtime (config, logging, mode profiles)."""

from diagnostics.models import DiagnosticResult, DiagnosticStatus, overall_status
from diagnostics.runner import exit_code, format_results, run_diagnostics

__all__ = [
    "DiagnosticResult",
    "DiagnosticStatus",
    "exit_code",
    "format_results",
    "overall_status",
    "run_diagnostics",
]
