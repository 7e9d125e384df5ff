"""Tests for config diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from config.diagnostics import probe


def _write_default(tmp_path, text: str) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text(text, encoding="utf-8")


def test_config_probe_offline(tmp_path) -> None:
    """Config probe should pass with valid safety thresholds present."""

    _write_default(tmp_path, "safety:\n  MIN_DETR_SCORE: 0.35\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.PASS


def test_config_probe_warns_without_safety_section(tmp_path) -> None:
    _write_default(tmp_path, "{}")

    assert probe(base_dir=tmp_path).status is DiagnosticStatus.WARN


def test_config_probe_fails_on_invalid_thresholds(tmp_path) -> None:
    _write_default(tmp_path, "safety:\n  NEAR_AREA_RATIO: 0.01\n  MID_AREA_RATIO: 0.04\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "Invalid safety config" in result.details


def test_config_probe_fails_without_config_dir(tmp_path) -> None:
    assert probe(base_dir=tmp_path).status is DiagnosticStatus.FAIL
