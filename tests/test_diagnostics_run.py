"""Tests for the diagnostics command-line entry point."""

from __future__ import annotations

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from diagnostics.run import main
from diagnostics.runner import format_results, run_diagnostics, worst_status


def test_offline_run_passes(capsys) -> None:
    exit_code = main(["--offline", "--frames", "2"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "[PASS] vision" in output
    assert "[PASS] config" in output


def test_live_run_fails_without_config(tmp_path, capsys) -> None:
    exit_code = main(["--base-dir", str(tmp_path)])

    assert exit_code == 1
    assert "[FAIL] config" in capsys.readouterr().out


def test_runner_turns_probe_exceptions_into_failures() -> None:
    def broken_probe() -> DiagnosticResult:
        raise RuntimeError("probe exploded")

    results = run_diagnostics([broken_probe])

    assert results[0].failed
    assert results[0].name == "broken_probe"
    assert "[FAIL] broken_probe" in format_results(results)


def test_worst_status_orders_by_severity() -> None:
    results = [
        DiagnosticResult(name="config", status=DiagnosticStatus.PASS, details=""),
        DiagnosticResult(name="vision", status=DiagnosticStatus.WARN, details=""),
    ]

    assert worst_status(results) is DiagnosticStatus.WARN
    assert worst_status([]) is DiagnosticStatus.PASS
    assert not any(result.failed for result in results)
