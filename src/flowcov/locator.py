# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate the checker executable and project markers."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Final

from .config import Settings

LOGGER = logging.getLogger(__name__)

DEFAULT_EXECUTABLE: Final[str] = "flow"
LOCAL_BIN_LOCATION: Final[str] = "node_modules/.bin/flow"
PROJECT_MARKER: Final[str] = ".flowconfig"


@lru_cache(maxsize=256)
def _find_upward_cached(start: str, name: str) -> str | None:
    directory = Path(start)
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / name
        if candidate.exists():
            return str(candidate)
    return None


def find_upward(start: Path | str, name: str) -> Path | None:
    """Return the first ``<dir>/<name>`` that exists from ``start`` to the root.

    Lookups are memoised per ``(start, name)``; call :func:`clear_find_cache`
    after creating or removing marker files.

    Args:
        start: Directory where the search begins.
        name: Relative path to look for in each directory.

    Returns:
        Path | None: Matching path, or ``None`` when nothing was found.
    """

    found = _find_upward_cached(os.fspath(start), name)
    return Path(found) if found is not None else None


def clear_find_cache() -> None:
    _find_upward_cached.cache_clear()


def find_project_config(start: Path | str) -> Path | None:
    """Return the nearest ``.flowconfig`` at or above ``start``."""

    return find_upward(start, PROJECT_MARKER)


def resolve_executable(start: Path | str, settings: Settings) -> str:
    """Return the checker command to spawn for files under ``start``.

    Resolution order: the configured ``executable_path``, a project-local
    ``node_modules/.bin/flow`` found upward from ``start``, then the bare
    ``flow`` command left for ``PATH`` lookup at spawn time. Never raises.
    """

    if settings.executable_path:
        return settings.executable_path
    try:
        local = find_upward(start, LOCAL_BIN_LOCATION)
    except (OSError, ValueError) as exc:
        LOGGER.debug("project-local flow lookup failed under %s: %s", start, exc)
        local = None
    if local is not None:
        return str(local)
    return DEFAULT_EXECUTABLE


__all__ = [
    "DEFAULT_EXECUTABLE",
    "LOCAL_BIN_LOCATION",
    "PROJECT_MARKER",
    "clear_find_cache",
    "find_project_config",
    "find_upward",
    "resolve_executable",
]
