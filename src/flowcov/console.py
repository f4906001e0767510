# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal output for the command-line host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from rich.console import Console
from rich.text import Text

MessageKind = Literal["info", "ok", "warn", "fail"]

_MARKERS: Final[dict[MessageKind, tuple[str, str]]] = {
    "info": ("ℹ️", "cyan"),
    "ok": ("✅", "green"),
    "warn": ("⚠️", "yellow"),
    "fail": ("❌", "red"),
}


@dataclass(slots=True)
class TerminalOutput:
    """Rich console shared by the status line, region table and status messages.

    Colour follows Rich's own terminal detection, so piped output and the
    test runner get plain text.
    """

    console: Console
    use_emoji: bool = True

    def message(self, kind: MessageKind, text: str) -> None:
        glyph, style = _MARKERS[kind]
        self.console.print(Text(f"{glyph} {text}" if self.use_emoji else text, style=style))

    def info(self, text: str) -> None:
        self.message("info", text)

    def ok(self, text: str) -> None:
        self.message("ok", text)

    def warn(self, text: str) -> None:
        self.message("warn", text)

    def fail(self, text: str) -> None:
        self.message("fail", text)


def terminal_output(*, emoji: bool) -> TerminalOutput:
    """Return output bound to the current stdout for one command run."""

    return TerminalOutput(Console(highlight=False, emoji=emoji, soft_wrap=True), use_emoji=emoji)


__all__ = ["MessageKind", "TerminalOutput", "terminal_output"]
