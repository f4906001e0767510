# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document cache of the latest coverage report."""

from __future__ import annotations

from collections.abc import Iterator

from .models import CoverageReport


class CoverageCache:
    """Map stable document identifiers to their last successful report.

    The host must call :meth:`evict` when a document closes; nothing is
    reclaimed implicitly.
    """

    def __init__(self) -> None:
        self._reports: dict[str, CoverageReport] = {}

    def get(self, document_id: str | None) -> CoverageReport | None:
        if document_id is None:
            return None
        return self._reports.get(document_id)

    def set(self, document_id: str, report: CoverageReport) -> None:
        self._reports[document_id] = report

    def evict(self, document_id: str) -> None:
        self._reports.pop(document_id, None)

    def clear(self) -> None:
        self._reports.clear()

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._reports

    def __iter__(self) -> Iterator[str]:
        return iter(self._reports)

    def __len__(self) -> int:
        return len(self._reports)


__all__ = ["CoverageCache"]
