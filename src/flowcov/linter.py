# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Linter provider computing Flow coverage for a document."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import ClassVar, Final

from .cache import CoverageCache
from .config import Settings
from .interfaces import TextDocument
from .locator import find_project_config, resolve_executable
from .mapper import parse_coverage, to_diagnostics
from .models import CoverageReport, Diagnostic
from .process import DEFAULT_TIMEOUT, CommandOptions, Invoker, run_checker
from .retry import CoverageRequest
from .servers import SpawnedServers

LOGGER = logging.getLogger(__name__)

UNIQUE_KEY_PREFIX: Final[str] = "flowcov-coverage"

ReportCallback = Callable[[TextDocument, CoverageReport], None]


class CoverageLinter:
    """Lint provider registered with the host's linter service.

    Settings are read once per :meth:`lint` call through the injected
    ``settings`` callable, so changes apply to the next lint.
    """

    name: ClassVar[str] = "Flow Coverage"
    scope: ClassVar[str] = "file"
    grammar_scopes: ClassVar[tuple[str, ...]] = ("source.js", "source.js.jsx")
    lints_on_change: ClassVar[bool] = False

    def __init__(
        self,
        *,
        settings: Callable[[], Settings],
        cache: CoverageCache,
        servers: SpawnedServers,
        invoker: Invoker = run_checker,
        on_report: ReportCallback | None = None,
        is_open: Callable[[str], bool] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Create a linter sharing state with the owning package.

        Args:
            settings: Returns the settings snapshot for a lint call.
            cache: Cache receiving each successfully parsed report.
            servers: Registry of servers started by lint calls.
            invoker: Coroutine used to run the checker.
            on_report: Called with every freshly parsed report.
            is_open: Reports whether a document id is still open; closed
                documents stop retrying.
            timeout: Seconds allowed per checker invocation.
        """

        self._settings = settings
        self._cache = cache
        self._servers = servers
        self._invoker = invoker
        self._on_report = on_report
        self._is_open = is_open
        self._timeout = timeout

    async def lint(self, document: TextDocument) -> list[Diagnostic] | None:
        """Compute coverage diagnostics for ``document``.

        Args:
            document: Document to lint; unsaved documents yield no messages.

        Returns:
            list[Diagnostic] | None: Diagnostics to display, an empty list when
            linting is not appropriate, or ``None`` when this request was
            superseded or cancelled and existing messages should stay.

        Raises:
            LintError: If the checker executable cannot be found.
            CoverageParseError: If the checker output is malformed.
            FlowcovError: Any other invocation failure.
        """

        settings = self._settings()
        if not document.path:
            return []
        file_path = document.path
        directory = Path(file_path).parent

        config_file = find_project_config(directory)
        if settings.only_if_appropriate and config_file is None:
            LOGGER.debug("no .flowconfig above %s; skipping coverage", file_path)
            return []

        document_id = document.document_id
        request = CoverageRequest(
            executable=resolve_executable(directory, settings),
            args=["coverage", file_path, "--json"],
            options=CommandOptions(
                cwd=directory,
                timeout=self._timeout,
                ignore_exit_code=True,
                unique_key=f"{UNIQUE_KEY_PREFIX}:{document_id}",
            ),
            config_file=config_file,
            servers=self._servers,
            invoker=self._invoker,
            is_cancelled=self._cancellation_check(document_id),
        )
        output = await request.run()
        if output is None:
            return None

        report = parse_coverage(output)
        if self._is_open is not None and not self._is_open(document_id):
            return None
        self._cache.set(document_id, report)
        if self._on_report is not None:
            self._on_report(document, report)
        return to_diagnostics(report, file_path, show_uncovered=settings.show_uncovered)

    def _cancellation_check(self, document_id: str) -> Callable[[], bool] | None:
        is_open = self._is_open
        if is_open is None:
            return None
        return lambda: not is_open(document_id)


__all__ = ["UNIQUE_KEY_PREFIX", "CoverageLinter"]
