# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from flowcov.locator import clear_find_cache


@pytest.fixture(autouse=True)
def _fresh_find_cache() -> Iterator[None]:
    """Drop memoised upward lookups so each test sees its own tree."""
    clear_find_cache()
    yield
    clear_find_cache()


@pytest.fixture
def flow_project(tmp_path: Path) -> Path:
    """Return a project root holding a ``.flowconfig`` and ``src/app.js``."""
    (tmp_path / ".flowconfig").write_text("[options]\n", encoding="utf-8")
    source = tmp_path / "src"
    source.mkdir()
    (source / "app.js").write_text("// @flow\nconst answer = 42;\n", encoding="utf-8")
    return tmp_path
