# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for coverage parsing and diagnostic mapping."""

from __future__ import annotations

import json

import pytest

from flowcov.errors import CoverageParseError
from flowcov.mapper import UNCOVERED_MESSAGE, coverage_percent, coverage_summary, parse_coverage, to_diagnostics
from flowcov.severity import Severity
from tests.helpers.fakes import coverage_json


@pytest.mark.parametrize(
    ("covered", "uncovered", "expected"),
    [
        (0, 0, 0),
        (3, 1, 75),
        (1, 3, 25),
        (1, 2, 33),
        (2, 1, 67),
        (1, 7, 13),
        (10, 0, 100),
    ],
)
def test_coverage_percent_rounds_to_nearest(covered: int, uncovered: int, expected: int) -> None:
    report = parse_coverage(coverage_json(covered, uncovered))
    assert coverage_percent(report) == expected


def test_summary_strings() -> None:
    summary = coverage_summary(parse_coverage(coverage_json(3, 1)))
    assert summary.text == "Coverage: 75%"
    assert summary.tooltip == "Covered 75% (3 of 4 expressions)"


def test_parse_rejects_invalid_json() -> None:
    with pytest.raises(CoverageParseError):
        parse_coverage("flow is not JSON")


def test_parse_rejects_empty_output() -> None:
    with pytest.raises(CoverageParseError):
        parse_coverage("   \n")


@pytest.mark.parametrize(
    "payload",
    [
        {"uncoveredLocations": []},
        {"expressions": {"covered_count": 1}, "uncoveredLocations": []},
        {"expressions": {"covered_count": 1, "uncovered_count": 0}},
        {"expressions": {"covered_count": -1, "uncovered_count": 0}, "uncoveredLocations": []},
        [1, 2, 3],
    ],
)
def test_parse_rejects_missing_fields(payload: object) -> None:
    with pytest.raises(CoverageParseError):
        parse_coverage(json.dumps(payload))


@pytest.mark.parametrize(
    "payload",
    [
        {"expressions": {"covered_count": "3", "uncovered_count": 1}, "uncoveredLocations": []},
        {"expressions": {"covered_count": 3.0, "uncovered_count": 1}, "uncoveredLocations": []},
        {"expressions": {"covered_count": True, "uncovered_count": 1}, "uncoveredLocations": []},
        {
            "expressions": {"covered_count": 3, "uncovered_count": 1},
            "uncoveredLocations": [{"start": {"line": "1", "col": 2}, "end": {"line": 1, "col": 4}}],
        },
        {
            "expressions": {"covered_count": 3, "uncovered_count": 1},
            "uncoveredLocations": [{"start": {"line": 1, "col": "2"}, "end": {"line": 1, "col": 4}}],
        },
    ],
)
def test_parse_rejects_ill_typed_fields(payload: object) -> None:
    with pytest.raises(CoverageParseError):
        parse_coverage(json.dumps(payload))


def test_parse_accepts_native_flow_layout() -> None:
    payload = {
        "expressions": {
            "covered_count": 5,
            "uncovered_count": 1,
            "uncovered_locations": [
                {
                    "source": "/repo/src/app.js",
                    "type": "SourceFile",
                    "start": {"line": 4, "column": 7, "offset": 40},
                    "end": {"line": 4, "column": 12, "offset": 45},
                }
            ],
        }
    }
    report = parse_coverage(json.dumps(payload))

    assert report.percent == 83
    (region,) = report.uncovered_locations
    assert region.source == "/repo/src/app.js"
    assert (region.start.line, region.start.column) == (4, 7)


def test_diagnostics_empty_when_uncovered_hidden() -> None:
    report = parse_coverage(coverage_json(1, 2, [(1, 1, 1, 4), (3, 2, 3, 8)]))
    assert to_diagnostics(report, "/repo/a.js", show_uncovered=False) == []


def test_diagnostics_one_per_region_with_exact_positions() -> None:
    regions = [(1, 1, 1, 4), (3, 2, 5, 8), (9, 10, 9, 11)]
    report = parse_coverage(coverage_json(1, 3, regions))

    diagnostics = to_diagnostics(report, "/repo/a.js", show_uncovered=True)

    assert len(diagnostics) == len(regions)
    for diagnostic, (line, col, end_line, end_col) in zip(diagnostics, regions):
        assert diagnostic.file == "/repo/a.js"
        assert diagnostic.severity is Severity.INFO
        assert diagnostic.message == UNCOVERED_MESSAGE
        assert (diagnostic.range.start.line, diagnostic.range.start.column) == (line, col)
        assert (diagnostic.range.end.line, diagnostic.range.end.column) == (end_line, end_col)


def test_report_is_immutable() -> None:
    report = parse_coverage(coverage_json(1, 1))
    with pytest.raises(ValueError):
        report.expressions = report.expressions  # type: ignore[misc]
