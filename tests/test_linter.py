# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the coverage linter provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from flowcov.cache import CoverageCache
from flowcov.config import Settings
from flowcov.errors import CheckerInvocationError, CoverageParseError, ExecutableNotFoundError, LintError
from flowcov.linter import UNIQUE_KEY_PREFIX, CoverageLinter
from flowcov.models import CoverageReport
from flowcov.process import DEFAULT_TIMEOUT
from flowcov.servers import SpawnedServers
from tests.helpers.fakes import Document, FakeInvoker, coverage_json


def _linter(
    invoker: FakeInvoker,
    settings: Settings | None = None,
    **kwargs: object,
) -> tuple[CoverageLinter, CoverageCache, SpawnedServers]:
    cache = CoverageCache()
    servers = SpawnedServers()
    active = settings or Settings()
    linter = CoverageLinter(
        settings=lambda: active,
        cache=cache,
        servers=servers,
        invoker=invoker,
        **kwargs,  # type: ignore[arg-type]
    )
    return linter, cache, servers


def _document(project: Path) -> Document:
    path = project / "src" / "app.js"
    return Document(document_id=str(path), path=str(path))


def test_linter_metadata() -> None:
    assert CoverageLinter.name == "Flow Coverage"
    assert CoverageLinter.scope == "file"
    assert CoverageLinter.grammar_scopes == ("source.js", "source.js.jsx")
    assert CoverageLinter.lints_on_change is False


@pytest.mark.asyncio
async def test_invokes_coverage_command(flow_project: Path) -> None:
    invoker = FakeInvoker(coverage_json())
    linter, _, _ = _linter(invoker)
    document = _document(flow_project)

    await linter.lint(document)

    (call,) = invoker.calls
    assert call.executable == "flow"
    assert call.args == ("coverage", document.path, "--json")
    assert call.options.cwd == flow_project / "src"
    assert call.options.timeout == DEFAULT_TIMEOUT == 60.0
    assert call.options.ignore_exit_code is True
    assert call.options.unique_key == f"{UNIQUE_KEY_PREFIX}:{document.document_id}"


@pytest.mark.asyncio
async def test_hidden_uncovered_returns_empty_but_caches(flow_project: Path) -> None:
    invoker = FakeInvoker(coverage_json(1, 2, [(1, 1, 1, 5), (2, 1, 2, 3)]))
    linter, cache, _ = _linter(invoker, Settings(show_uncovered=False))
    document = _document(flow_project)

    assert await linter.lint(document) == []

    report = cache.get(document.document_id)
    assert report is not None and report.percent == 33


@pytest.mark.asyncio
async def test_shown_uncovered_returns_one_diagnostic_per_region(flow_project: Path) -> None:
    invoker = FakeInvoker(coverage_json(1, 2, [(1, 1, 1, 5), (2, 1, 2, 3)]))
    linter, _, _ = _linter(invoker, Settings(show_uncovered=True))

    diagnostics = await linter.lint(_document(flow_project))

    assert diagnostics is not None
    assert [(d.range.start.line, d.range.end.column) for d in diagnostics] == [(1, 5), (2, 3)]


@pytest.mark.asyncio
async def test_only_if_appropriate_without_flowconfig_skips_invocation(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    invoker = FakeInvoker(coverage_json())
    linter, cache, _ = _linter(invoker, Settings(only_if_appropriate=True))
    document = _document(tmp_path)

    assert await linter.lint(document) == []
    assert invoker.calls == []
    assert cache.get(document.document_id) is None


@pytest.mark.asyncio
async def test_only_if_appropriate_with_flowconfig_lints(flow_project: Path) -> None:
    invoker = FakeInvoker(coverage_json())
    linter, _, _ = _linter(invoker, Settings(only_if_appropriate=True))

    assert await linter.lint(_document(flow_project)) == []
    assert len(invoker.calls) == 1


@pytest.mark.asyncio
async def test_unsaved_document_yields_nothing() -> None:
    invoker = FakeInvoker(coverage_json())
    linter, _, _ = _linter(invoker)

    assert await linter.lint(Document(document_id="untitled-1", path=None)) == []
    assert invoker.calls == []


@pytest.mark.asyncio
async def test_not_found_surfaces_user_message(flow_project: Path) -> None:
    linter, _, _ = _linter(FakeInvoker(ExecutableNotFoundError("flow")))

    with pytest.raises(LintError, match="Unable to find `flow` executable."):
        await linter.lint(_document(flow_project))


@pytest.mark.asyncio
async def test_failed_lint_keeps_previous_report(flow_project: Path) -> None:
    invoker = FakeInvoker(coverage_json(3, 1), "not json")
    linter, cache, _ = _linter(invoker)
    document = _document(flow_project)

    await linter.lint(document)
    first = cache.get(document.document_id)
    with pytest.raises(CoverageParseError):
        await linter.lint(document)

    assert cache.get(document.document_id) is first


@pytest.mark.asyncio
async def test_server_start_is_recorded_against_project_root(flow_project: Path) -> None:
    busy = CheckerInvocationError(["flow"], 0, "", "Started a new flow server: -")
    linter, _, servers = _linter(FakeInvoker(busy, coverage_json()))

    await linter.lint(_document(flow_project))

    assert flow_project in servers


@pytest.mark.asyncio
async def test_superseded_lint_returns_none_and_keeps_cache(flow_project: Path) -> None:
    linter, cache, _ = _linter(FakeInvoker(None))
    document = _document(flow_project)

    assert await linter.lint(document) is None
    assert cache.get(document.document_id) is None


@pytest.mark.asyncio
async def test_closed_document_is_not_cached(flow_project: Path) -> None:
    reports: list[CoverageReport] = []
    linter, cache, _ = _linter(
        FakeInvoker(coverage_json()),
        on_report=lambda _doc, report: reports.append(report),
        is_open=lambda _document_id: False,
    )
    document = _document(flow_project)

    assert await linter.lint(document) is None
    assert cache.get(document.document_id) is None
    assert reports == []


@pytest.mark.asyncio
async def test_report_callback_receives_parsed_report(flow_project: Path) -> None:
    reports: list[CoverageReport] = []
    linter, _, _ = _linter(FakeInvoker(coverage_json(3, 1)), on_report=lambda _doc, report: reports.append(report))

    await linter.lint(_document(flow_project))

    assert [report.percent for report in reports] == [75]
