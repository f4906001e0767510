# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models for checker coverage reports and host diagnostics."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, model_validator

from .severity import Severity


class Position(BaseModel):
    """A line/column pair reported by the checker."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    line: StrictInt
    column: StrictInt = Field(validation_alias=AliasChoices("col", "column"))


class Region(BaseModel):
    """Source span the checker judged as uncovered."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position
    source: str | None = None


class ExpressionCounts(BaseModel):
    """Covered and uncovered expression totals."""

    model_config = ConfigDict(frozen=True)

    covered_count: StrictInt = Field(ge=0)
    uncovered_count: StrictInt = Field(ge=0)


class CoverageReport(BaseModel):
    """Coverage report for a single file, immutable once parsed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    expressions: ExpressionCounts
    uncovered_locations: tuple[Region, ...] = Field(alias="uncoveredLocations")

    @model_validator(mode="before")
    @classmethod
    def _lift_nested_locations(cls, data: Any) -> Any:
        """Accept Flow's native layout, which nests locations under ``expressions``."""
        if not isinstance(data, dict) or "uncoveredLocations" in data or "uncovered_locations" in data:
            return data
        expressions = data.get("expressions")
        if isinstance(expressions, dict) and "uncovered_locations" in expressions:
            return {**data, "uncoveredLocations": expressions["uncovered_locations"]}
        return data

    @property
    def covered(self) -> int:
        return self.expressions.covered_count

    @property
    def uncovered(self) -> int:
        return self.expressions.uncovered_count

    @property
    def total(self) -> int:
        return self.covered + self.uncovered

    @property
    def percent(self) -> int:
        """Return the covered share as a whole percentage, ``0`` for empty files."""
        if self.total == 0:
            return 0
        ratio = Decimal(self.covered) * 100 / Decimal(self.total)
        return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class CoverageSummary(BaseModel):
    """Display strings derived from a :class:`CoverageReport`."""

    model_config = ConfigDict(frozen=True)

    percent: int
    covered: int
    total: int

    @property
    def text(self) -> str:
        return f"Coverage: {self.percent}%"

    @property
    def tooltip(self) -> str:
        return f"Covered {self.percent}% ({self.covered} of {self.total} expressions)"


class Diagnostic(BaseModel):
    """Normalized diagnostic handed to the linter host."""

    model_config = ConfigDict(frozen=True)

    file: str
    range: Region
    severity: Severity
    message: str
    tool: str = "flow-coverage"


__all__ = [
    "CoverageReport",
    "CoverageSummary",
    "Diagnostic",
    "ExpressionCounts",
    "Position",
    "Region",
]
