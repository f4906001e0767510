# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Package lifecycle binding the coverage pipeline to a host editor."""

from __future__ import annotations

import logging
from typing import Final

from .cache import CoverageCache
from .config import SettingsStore
from .interfaces import Disposable, Host, Notification, NotificationButton, StatusBar, StatusSurface, TextDocument
from .linter import CoverageLinter
from .locator import resolve_executable
from .models import CoverageReport
from .presenter import CoveragePresenter
from .process import Invoker, run_checker
from .servers import SpawnedServers

LOGGER = logging.getLogger(__name__)

PACKAGE_NAME: Final[str] = "flowcov"
STATUS_TILE_PRIORITY: Final[int] = 10
RESTART_MESSAGE: Final[str] = "Restart to update flowcov priority?"


class CoveragePackage:
    """Own the shared state of the integration for one host session.

    The host binding calls :meth:`activate` once, forwards focus and close
    events to :meth:`on_active_document_changed` and
    :meth:`on_document_closed`, and awaits :meth:`deactivate` on shutdown.
    """

    def __init__(self, settings: SettingsStore | None = None, *, invoker: Invoker = run_checker) -> None:
        self.settings = settings or SettingsStore()
        self.cache = CoverageCache()
        self.servers = SpawnedServers()
        self.presenter: CoveragePresenter | None = None
        self._invoker = invoker
        self._host: Host | None = None
        self._subscriptions: list[Disposable] = []
        self._tile: Disposable | None = None
        self._active_document_id: str | None = None
        self._closed_documents: set[str] = set()
        self._hyperclick_priority: int | None = None
        self._restart_notification: Notification | None = None
        self.linter = CoverageLinter(
            settings=self.settings.snapshot,
            cache=self.cache,
            servers=self.servers,
            invoker=invoker,
            on_report=self._on_report,
            is_open=self._is_open,
        )

    def activate(self, host: Host) -> None:
        """Install dependencies and start observing settings.

        Args:
            host: Services exposed by the host editor.
        """

        self._host = host
        host.installer.install(PACKAGE_NAME)
        self._subscriptions.append(self.settings.observe("hyperclick_priority", self._on_priority_changed))
        self._subscriptions.append(self.settings.observe("show_uncovered", self._on_show_uncovered_changed))

    async def deactivate(self, *, stop_servers: bool = True) -> None:
        """Release subscriptions and stop servers started by lint calls.

        Stop commands are scheduled on the running loop and not awaited, so a
        hanging checker cannot hold up shutdown. Their failures are discarded;
        await ``self.servers.wait_pending()`` to wait for them.

        Args:
            stop_servers: When false, servers started by lint calls keep running.
        """

        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        if self.presenter is not None:
            self.presenter.destroy()
            self.presenter = None
        if self._tile is not None:
            self._tile.dispose()
            self._tile = None
        if stop_servers:
            LOGGER.debug("stopping %d spawned flow server(s)", len(self.servers))
            snapshot = self.settings.snapshot()
            self.servers.stop_all_nowait(lambda root: resolve_executable(root, snapshot), invoker=self._invoker)
        self._closed_documents.clear()
        self._active_document_id = None
        self._host = None

    def provide_linter(self) -> list[CoverageLinter]:
        return [self.linter]

    def consume_status_bar(self, status_bar: StatusBar, surface: StatusSurface) -> CoveragePresenter:
        """Create the presenter and attach ``surface`` as a left status tile.

        Args:
            status_bar: Status bar service provided by the host.
            surface: Widget adapter the presenter renders into.

        Returns:
            CoveragePresenter: Presenter bound to ``surface``.
        """

        self.presenter = CoveragePresenter(surface, self.cache, self.settings)
        self._tile = status_bar.add_left_tile(item=surface, priority=STATUS_TILE_PRIORITY)
        self.presenter.show_document(self._active_document_id)
        return self.presenter

    def on_active_document_changed(self, document: TextDocument | None) -> None:
        self._active_document_id = document.document_id if document is not None else None
        if self._active_document_id is not None:
            self._closed_documents.discard(self._active_document_id)
        if self.presenter is not None:
            self.presenter.show_document(self._active_document_id)

    def on_document_opened(self, document: TextDocument) -> None:
        self._closed_documents.discard(document.document_id)

    def on_document_closed(self, document: TextDocument) -> None:
        """Evict the document's report and stop any retry loop running for it."""

        self.cache.evict(document.document_id)
        self._closed_documents.add(document.document_id)
        if self._active_document_id == document.document_id:
            self.on_active_document_changed(None)

    def _is_open(self, document_id: str) -> bool:
        return document_id not in self._closed_documents

    def _on_report(self, document: TextDocument, report: CoverageReport) -> None:
        if self.presenter is None:
            return
        if self._active_document_id in (None, document.document_id):
            self.presenter.update(report)

    def _on_show_uncovered_changed(self, _value: bool) -> None:
        if self._host is None:
            return
        document = self._host.active_document()
        if document is not None:
            self._host.request_lint(document)

    def _on_priority_changed(self, priority: int) -> None:
        previous = self._hyperclick_priority
        self._hyperclick_priority = priority
        if previous is None or priority == previous or self._host is None:
            return
        if self._restart_notification is not None:
            return
        host = self._host
        notification = host.notifications.add_success(
            RESTART_MESSAGE,
            dismissable=True,
            buttons=[NotificationButton(text="Restart", on_did_click=host.restart_application)],
        )
        self._restart_notification = notification
        notification.on_did_dismiss(self._on_restart_dismissed)

    def _on_restart_dismissed(self) -> None:
        self._restart_notification = None


__all__ = ["PACKAGE_NAME", "STATUS_TILE_PRIORITY", "CoveragePackage"]
