# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Host editor interfaces consumed by the coverage package."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Disposable(Protocol):
    """Handle releasing a subscription or UI resource."""

    def dispose(self) -> None:
        """Release the underlying resource."""

        raise NotImplementedError


@runtime_checkable
class TextDocument(Protocol):
    """Open document as exposed by the host editor."""

    @property
    def document_id(self) -> str:
        """Return a stable identifier for the open document."""

        raise NotImplementedError

    @property
    def path(self) -> str | None:
        """Return the document's file path, ``None`` for unsaved buffers."""

        raise NotImplementedError


@runtime_checkable
class StatusSurface(Protocol):
    """Widget adapter rendering the coverage tile."""

    def set_text(self, text: str) -> None:
        """Replace the tile text."""

        raise NotImplementedError

    def set_tooltip(self, tooltip: str | None) -> None:
        """Replace the tile tooltip, ``None`` removes it."""

        raise NotImplementedError

    def show(self) -> None:
        """Make the tile visible."""

        raise NotImplementedError

    def hide(self) -> None:
        """Hide the tile."""

        raise NotImplementedError


@runtime_checkable
class StatusBar(Protocol):
    """Status bar service provided by the host."""

    def add_left_tile(self, *, item: Any, priority: int) -> Disposable:
        """Attach ``item`` to the left side of the status bar."""

        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class NotificationButton:
    """Button rendered inside a host notification."""

    text: str
    on_did_click: Callable[[], None]


@runtime_checkable
class Notification(Protocol):
    """Notification handle returned by the host."""

    def on_did_dismiss(self, callback: Callable[[], None]) -> Disposable:
        """Invoke ``callback`` once the user dismisses the notification."""

        raise NotImplementedError


@runtime_checkable
class Notifications(Protocol):
    """Notification centre provided by the host."""

    def add_success(
        self,
        message: str,
        *,
        dismissable: bool,
        buttons: Sequence[NotificationButton],
    ) -> Notification:
        """Show a success notification."""

        raise NotImplementedError


@runtime_checkable
class DependencyInstaller(Protocol):
    """Install packages this integration depends on."""

    def install(self, package_name: str) -> None:
        """Install missing dependencies for ``package_name``."""

        raise NotImplementedError


@runtime_checkable
class Host(Protocol):
    """Services the host editor exposes to the package."""

    notifications: Notifications
    installer: DependencyInstaller

    def active_document(self) -> TextDocument | None:
        """Return the focused document, if any."""

        raise NotImplementedError

    def request_lint(self, document: TextDocument) -> None:
        """Ask the host linter to lint ``document`` again."""

        raise NotImplementedError

    def restart_application(self) -> None:
        """Restart the host editor."""

        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class FileDocument:
    """Minimal :class:`TextDocument` backed by a path on disk."""

    path: str

    @property
    def document_id(self) -> str:
        return self.path


__all__ = [
    "DependencyInstaller",
    "Disposable",
    "FileDocument",
    "Host",
    "Notification",
    "NotificationButton",
    "Notifications",
    "StatusBar",
    "StatusSurface",
    "TextDocument",
]
