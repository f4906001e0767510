# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the coverage status presenter."""

from __future__ import annotations

from rich.console import Console

from flowcov.cache import CoverageCache
from flowcov.config import SettingsStore
from flowcov.mapper import parse_coverage
from flowcov.presenter import TOGGLE_HINT, CoveragePresenter, RichStatusSurface
from tests.helpers.fakes import RecordingSurface, coverage_json


def _presenter() -> tuple[CoveragePresenter, RecordingSurface, CoverageCache, SettingsStore]:
    surface = RecordingSurface()
    cache = CoverageCache()
    store = SettingsStore()
    return CoveragePresenter(surface, cache, store), surface, cache, store


def test_update_renders_text_and_tooltip() -> None:
    presenter, surface, _, _ = _presenter()

    presenter.update(parse_coverage(coverage_json(3, 1)))

    assert surface.visible
    assert surface.text == "Coverage: 75%"
    assert surface.tooltip == f"Covered 75% (3 of 4 expressions)\n{TOGGLE_HINT}"


def test_reset_hides_and_clears() -> None:
    presenter, surface, _, _ = _presenter()
    presenter.update(parse_coverage(coverage_json(3, 1)))

    presenter.reset()

    assert not surface.visible
    assert surface.text == ""
    assert surface.tooltip is None


def test_switching_documents_uses_cache() -> None:
    presenter, surface, cache, _ = _presenter()
    cache.set("a.js", parse_coverage(coverage_json(1, 3)))

    presenter.show_document("a.js")
    assert surface.text == "Coverage: 25%"

    presenter.show_document("README.md")
    assert surface.text == ""
    assert not surface.visible

    presenter.show_document(None)
    assert not surface.visible


def test_click_toggles_show_uncovered() -> None:
    presenter, _, _, store = _presenter()

    presenter.click()
    assert store.get("show_uncovered") is True
    presenter.click()
    assert store.get("show_uncovered") is False


def test_rich_surface_renders_single_line() -> None:
    console = Console(record=True, width=120, color_system=None)
    surface = RichStatusSurface(console)
    presenter = CoveragePresenter(surface, CoverageCache(), SettingsStore())

    presenter.update(parse_coverage(coverage_json(1, 2)))
    surface.flush()

    output = console.export_text()
    assert "Coverage: 33%" in output
    assert "Covered 33% (1 of 3 expressions)" in output
    assert TOGGLE_HINT not in output


def test_rich_surface_hidden_renders_nothing() -> None:
    console = Console(record=True, width=120, color_system=None)
    surface = RichStatusSurface(console)

    surface.flush()

    assert console.export_text() == ""
