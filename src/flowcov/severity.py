# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels understood by linter hosts."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_SEVERITY_TO_SARIF_LEVEL: Final[dict[Severity, str]] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def severity_to_sarif(severity: Severity) -> str:
    """Map :class:`Severity` to a SARIF reporting level.

    Args:
        severity: Severity value to translate.

    Returns:
        str: SARIF level string, used by the JSON output of the CLI.
    """

    return _SEVERITY_TO_SARIF_LEVEL.get(severity, "warning")


__all__ = ["Severity", "severity_to_sarif"]
