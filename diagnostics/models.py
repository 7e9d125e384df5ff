"""Models for perception diagnostics results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiagnosticStatus(str, Enum):
    """Status for diagnostics checks, ordered from healthy to failing."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"

    @property
    def severity(self) -> int:
        return ("PASS", "WARN", "FAIL").index(self.value)


@dataclass(frozen=True)
class DiagnosticResult:
    """Result for a single probe (config, core or vision)."""

    name: str
    status: DiagnosticStatus
    details: str

    @property
    def failed(self) -> bool:
        return self.status is DiagnosticStatus.FAIL
