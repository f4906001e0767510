# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line host driving the coverage pipeline from a terminal."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.table import Table

from .config import Settings, SettingsStore, load_settings
from .console import TerminalOutput, terminal_output
from .errors import FlowcovError
from .interfaces import FileDocument, NotificationButton, TextDocument
from .locator import resolve_executable
from .models import Diagnostic
from .package import CoveragePackage
from .presenter import RichStatusSurface
from .process import run_checker
from .servers import SpawnedServers
from .severity import severity_to_sarif

LOGGER = logging.getLogger(__name__)

app = typer.Typer(name="flowcov", help="Flow type coverage for files and projects.", no_args_is_help=True)

FILE_ARGUMENT = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, resolve_path=True, help="JavaScript file to measure."),
]
ROOT_ARGUMENT = Annotated[
    Path,
    typer.Argument(file_okay=False, resolve_path=True, help="Project root directory."),
]
EXECUTABLE_OPTION = Annotated[
    str | None,
    typer.Option("--executable", "-e", help="Path to the flow binary (overrides settings)."),
]
SHOW_UNCOVERED_OPTION = Annotated[
    bool | None,
    typer.Option("--show-uncovered/--hide-uncovered", help="List uncovered regions."),
]
ONLY_IF_APPROPRIATE_OPTION = Annotated[
    bool | None,
    typer.Option("--only-if-appropriate/--always", help="Skip files without a .flowconfig above them."),
]
JSON_OPTION = Annotated[bool, typer.Option("--json", help="Emit the report and diagnostics as JSON.")]
KEEP_SERVER_OPTION = Annotated[
    bool,
    typer.Option("--keep-server", help="Leave a flow server started by this run running."),
]
EMOJI_OPTION = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Toggle emoji output.")]
VERBOSE_OPTION = Annotated[bool, typer.Option("--verbose", "-v", help="Log checker invocations.")]


@dataclass(slots=True)
class _Notification:
    dismiss_callbacks: list[Any] = field(default_factory=list)

    def on_did_dismiss(self, callback: Any) -> _Disposable:
        self.dismiss_callbacks.append(callback)
        return _Disposable()


class _Disposable:
    def dispose(self) -> None:
        return None


class _Notifications:
    def __init__(self, output: TerminalOutput) -> None:
        self._output = output

    def add_success(
        self,
        message: str,
        *,
        dismissable: bool,
        buttons: Sequence[NotificationButton],
    ) -> _Notification:
        del dismissable, buttons
        self._output.info(message)
        return _Notification()


class _Installer:
    def install(self, package_name: str) -> None:
        LOGGER.debug("dependencies for %s are managed by pip", package_name)


class _StatusBar:
    def add_left_tile(self, *, item: Any, priority: int) -> _Disposable:
        LOGGER.debug("status tile %r added with priority %d", item, priority)
        return _Disposable()


class CliHost:
    """Host implementation with a single open document and no UI loop."""

    def __init__(self, document: TextDocument | None, output: TerminalOutput) -> None:
        self.document = document
        self.notifications = _Notifications(output)
        self.installer = _Installer()
        self.lint_requests: list[TextDocument] = []

    def active_document(self) -> TextDocument | None:
        return self.document

    def request_lint(self, document: TextDocument) -> None:
        self.lint_requests.append(document)

    def restart_application(self) -> None:
        LOGGER.debug("restart requested; nothing to restart in the terminal host")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(name)s: %(message)s")


def _resolve_settings(
    start: Path,
    *,
    executable: str | None,
    show_uncovered: bool | None,
    only_if_appropriate: bool | None,
) -> Settings:
    settings = load_settings(start)
    overrides: dict[str, Any] = {}
    if executable is not None:
        overrides["executable_path"] = executable
    if show_uncovered is not None:
        overrides["show_uncovered"] = show_uncovered
    if only_if_appropriate is not None:
        overrides["only_if_appropriate"] = only_if_appropriate
    return settings.model_copy(update=overrides)


def _diagnostics_table(diagnostics: Sequence[Diagnostic]) -> Table:
    table = Table(title="Uncovered regions", show_lines=False)
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Message")
    for diagnostic in diagnostics:
        start = diagnostic.range.start
        end = diagnostic.range.end
        table.add_row(f"{start.line}:{start.column}", f"{end.line}:{end.column}", diagnostic.message)
    return table


def _emit_json(document: FileDocument, package: CoveragePackage, diagnostics: Sequence[Diagnostic]) -> None:
    report = package.cache.get(document.document_id)
    payload: dict[str, Any] = {
        "file": document.path,
        "report": report.model_dump(mode="json", by_alias=True) if report is not None else None,
        "percent": report.percent if report is not None else None,
        "diagnostics": [
            {**diagnostic.model_dump(mode="json"), "level": severity_to_sarif(diagnostic.severity)}
            for diagnostic in diagnostics
        ],
    }
    typer.echo(json.dumps(payload, indent=2))


async def _shutdown(package: CoveragePackage, *, stop_servers: bool) -> None:
    """Deactivate ``package`` and wait for its stop commands before the loop closes."""

    await package.deactivate(stop_servers=stop_servers)
    await package.servers.wait_pending()


@app.command("coverage")
def coverage_command(
    file: FILE_ARGUMENT,
    executable: EXECUTABLE_OPTION = None,
    show_uncovered: SHOW_UNCOVERED_OPTION = None,
    only_if_appropriate: ONLY_IF_APPROPRIATE_OPTION = None,
    as_json: JSON_OPTION = False,
    keep_server: KEEP_SERVER_OPTION = False,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Measure Flow coverage for FILE."""

    _configure_logging(verbose)
    output = terminal_output(emoji=emoji)
    try:
        settings = _resolve_settings(
            file.parent,
            executable=executable,
            show_uncovered=show_uncovered,
            only_if_appropriate=only_if_appropriate,
        )
    except FlowcovError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=1) from exc

    document = FileDocument(str(file))
    package = CoveragePackage(SettingsStore(settings), invoker=run_checker)
    package.activate(CliHost(document, output))
    package.on_active_document_changed(document)
    surface = RichStatusSurface(output.console)
    package.consume_status_bar(_StatusBar(), surface)

    diagnostics: list[Diagnostic] | None = None
    try:
        diagnostics = asyncio.run(package.linter.lint(document))
    except FlowcovError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=1) from exc
    else:
        if diagnostics is None:
            output.warn("Coverage request was superseded; no result.")
        elif as_json:
            _emit_json(document, package, diagnostics)
        elif package.cache.get(document.document_id) is None:
            output.info(f"Skipped {file.name}: no .flowconfig found.")
        else:
            surface.flush()
            if diagnostics and surface.console is not None:
                surface.console.print(_diagnostics_table(diagnostics))
    finally:
        asyncio.run(_shutdown(package, stop_servers=not keep_server))
    if diagnostics is None:
        raise typer.Exit(code=1)


@app.command("stop")
def stop_command(
    root: ROOT_ARGUMENT = Path("."),
    executable: EXECUTABLE_OPTION = None,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Stop the flow server for ROOT (best effort)."""

    _configure_logging(verbose)
    output = terminal_output(emoji=emoji)
    try:
        settings = _resolve_settings(root, executable=executable, show_uncovered=None, only_if_appropriate=None)
    except FlowcovError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=1) from exc
    servers = SpawnedServers()
    servers.add(root)
    asyncio.run(servers.stop_all(lambda directory: resolve_executable(directory, settings), invoker=run_checker))
    output.ok(f"Requested flow server stop in {root}")


@app.command("config")
def config_command(
    root: ROOT_ARGUMENT = Path("."),
    emoji: EMOJI_OPTION = True,
) -> None:
    """Print the resolved settings for ROOT as JSON."""

    output = terminal_output(emoji=emoji)
    try:
        settings = load_settings(root)
    except FlowcovError as exc:
        output.fail(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(settings.model_dump(by_alias=True), indent=2))


__all__ = ["CliHost", "app"]
