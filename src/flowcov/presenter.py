# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status tile presentation of coverage results."""

from __future__ import annotations

from typing import Final

from rich.console import Console
from rich.text import Text

from .cache import CoverageCache
from .config import SettingsStore
from .interfaces import StatusSurface
from .mapper import coverage_summary
from .models import CoverageReport

TOGGLE_HINT: Final[str] = "Click to toggle uncovered code"


class CoveragePresenter:
    """Render the coverage of the active document onto a :class:`StatusSurface`."""

    def __init__(self, surface: StatusSurface, cache: CoverageCache, settings: SettingsStore) -> None:
        """Bind the presenter to its widget adapter and shared state.

        Args:
            surface: Widget adapter owned by the host binding.
            cache: Per-document report cache consulted on focus changes.
            settings: Store toggled when the user clicks the tile.
        """

        self.surface = surface
        self._cache = cache
        self._settings = settings

    def update(self, report: CoverageReport) -> None:
        """Show the summary for ``report``."""

        summary = coverage_summary(report)
        self.surface.set_text(summary.text)
        self.surface.set_tooltip(f"{summary.tooltip}\n{TOGGLE_HINT}")
        self.surface.show()

    def reset(self) -> None:
        """Hide and clear the tile."""

        self.surface.hide()
        self.surface.set_text("")
        self.surface.set_tooltip(None)

    def show_document(self, document_id: str | None) -> None:
        """Reflect the cached report of the newly active document, if any."""

        report = self._cache.get(document_id)
        if report is None:
            self.reset()
        else:
            self.update(report)

    def click(self) -> None:
        """Toggle the ``show_uncovered`` setting.

        Observers of the setting re-lint the active document so the display
        is recomputed with the new flag.
        """

        self._settings.set("show_uncovered", not self._settings.get("show_uncovered"))

    def destroy(self) -> None:
        self.surface.set_tooltip(None)


class RichStatusSurface:
    """:class:`StatusSurface` rendering the tile as a single Rich line."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console
        self.text = ""
        self.tooltip: str | None = None
        self.visible = False

    def set_text(self, text: str) -> None:
        self.text = text

    def set_tooltip(self, tooltip: str | None) -> None:
        self.tooltip = tooltip

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def render(self) -> Text:
        """Return the tile as styled text; empty when hidden."""

        if not self.visible:
            return Text("")
        line = Text(self.text, style="bold")
        if self.tooltip:
            first = self.tooltip.splitlines()[0]
            line.append(f"  {first}", style="dim")
        return line

    def flush(self) -> None:
        if self.console is not None and self.visible:
            self.console.print(self.render())


__all__ = ["TOGGLE_HINT", "CoveragePresenter", "RichStatusSurface"]
