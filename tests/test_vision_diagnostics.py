"""Tests for perception diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from vision.capabilities import CapabilityHandle
from vision.diagnostics import probe
from vision.offline import FakeDetector, FakeEmbedder
from vision.pipeline import PerceptionCore


def _core(detector_ready: bool = True) -> PerceptionCore:
    detector = (
        CapabilityHandle.ready("detector", FakeDetector())
        if detector_ready
        else CapabilityHandle.not_ready("detector", "loading")
    )
    return PerceptionCore(detector, CapabilityHandle.ready("embedder", FakeEmbedder()))


def test_vision_probe_fails_without_core() -> None:
    assert probe().status is DiagnosticStatus.FAIL


def test_vision_probe_fails_when_models_not_ready() -> None:
    result = probe(_core(detector_ready=False))

    assert result.status is DiagnosticStatus.FAIL
    assert "detector (loading)" in result.details


def test_vision_probe_passes_within_budget() -> None:
    core = _core()
    for value in (40.0, 60.0, 80.0):
        core.metrics.observe("detect_ms", value)

    result = probe(core)

    assert result.status is DiagnosticStatus.PASS
    assert "search_ms=no data" in result.details


def test_vision_probe_warns_over_budget() -> None:
    core = _core()
    for _ in range(10):
        core.metrics.observe("search_ms", 250.0)

    result = probe(core)

    assert result.status is DiagnosticStatus.WARN
    assert "search_ms" in result.details
