"""Diagnostics routines for the perception core."""

from __future__ import annotations

from typing import TYPE_CHECKING

from diagnostics.models import DiagnosticResult, DiagnosticStatus

if TYPE_CHECKING:
    from vision.pipeline import PerceptionCore

BUDGETED_METRICS = ("detect_ms", "search_ms")


def probe(core: "PerceptionCore | None" = None) -> DiagnosticResult:
    """Check model readiness and compare latency p95 against the frame budget.

    The frame budget is advisory, so an overrun is reported as WARN.

    Args:
        core: Perception core to inspect; FAIL when omitted.

    Returns:
        Diagnostic result indicating perception readiness.
    """

    name = "vision"
    if core is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="No perception core configured",
        )

    not_ready = [
        f"{handle.name} ({handle.reason or 'not ready'})"
        for handle in (core.detector, core.embedder)
        if not handle.is_ready
    ]
    if not_ready:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Models not ready: {', '.join(not_ready)}",
        )

    budget_ms = core.thresholds.target_frame_ms
    over_budget: list[str] = []
    parts: list[str] = []
    for metric in BUDGETED_METRICS:
        summary = core.summary(metric)
        if summary.n == 0:
            parts.append(f"{metric}=no data")
            continue
        parts.append(f"{metric} p95={summary.p95:.1f}ms n={summary.n}")
        if summary.p95 > budget_ms:
            over_budget.append(metric)

    rejected = core.governor.rejected
    details = f"{'; '.join(parts)}; rejected={rejected}"
    if over_budget:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Over {budget_ms:.0f}ms budget: {', '.join(over_budget)} ({details})",
        )
    return DiagnosticResult(name=name, status=DiagnosticStatus.PASS, details=details)
