# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Map checker output into coverage reports, summaries, and diagnostics."""

from __future__ import annotations

from typing import Final

from pydantic import ValidationError

from .errors import CoverageParseError
from .models import CoverageReport, CoverageSummary, Diagnostic
from .severity import Severity

UNCOVERED_MESSAGE: Final[str] = "Uncovered code"
DIAGNOSTIC_TOOL: Final[str] = "flow-coverage"


def parse_coverage(payload: str) -> CoverageReport:
    """Parse the checker's ``coverage --json`` output.

    Args:
        payload: Raw stdout captured from the checker.

    Returns:
        CoverageReport: Validated, immutable report.

    Raises:
        CoverageParseError: If ``payload`` is not JSON or lacks required fields.
    """

    if not payload or not payload.strip():
        raise CoverageParseError("checker produced no coverage output")
    try:
        return CoverageReport.model_validate_json(payload)
    except ValidationError as exc:
        raise CoverageParseError(f"invalid coverage report: {exc}") from exc


def coverage_percent(report: CoverageReport) -> int:
    """Return the rounded covered percentage, ``0`` when nothing was counted."""

    return report.percent


def coverage_summary(report: CoverageReport) -> CoverageSummary:
    return CoverageSummary(percent=report.percent, covered=report.covered, total=report.total)


def to_diagnostics(report: CoverageReport, file_path: str, *, show_uncovered: bool) -> list[Diagnostic]:
    """Convert uncovered regions into informational diagnostics.

    Args:
        report: Parsed coverage report.
        file_path: File the report describes; used when a region has no source.
        show_uncovered: When false no diagnostics are produced.

    Returns:
        list[Diagnostic]: One diagnostic per uncovered region, in report order.
    """

    if not show_uncovered:
        return []
    return [
        Diagnostic(
            file=region.source or file_path,
            range=region,
            severity=Severity.INFO,
            message=UNCOVERED_MESSAGE,
            tool=DIAGNOSTIC_TOOL,
        )
        for region in report.uncovered_locations
    ]


__all__ = [
    "UNCOVERED_MESSAGE",
    "coverage_percent",
    "coverage_summary",
    "parse_coverage",
    "to_diagnostics",
]
