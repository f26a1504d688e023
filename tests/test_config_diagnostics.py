"""Tests for config diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from config.diagnostics import probe


def _config_dir(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text("perception:\n  default_mode: indoor\n", encoding="utf-8")
    return config_dir


def test_config_probe_passes_without_override(tmp_path) -> None:
    _config_dir(tmp_path)

    result = probe(base_dir=tmp_path)

    assert result.status is DiagnosticStatus.PASS
    assert "no override" in result.details


def test_config_probe_fails_when_default_missing(tmp_path) -> None:
    assert probe(base_dir=tmp_path).status is DiagnosticStatus.FAIL


def test_config_probe_rejects_non_mapping_override(tmp_path) -> None:
    config_dir = _config_dir(tmp_path)
    (config_dir / "override.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    result = probe(base_dir=tmp_path)

    assert result.status is DiagnosticStatus.FAIL
    assert result.failed is True
