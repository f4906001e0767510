# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception taxonomy shared by the coverage pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

EXECUTABLE_NOT_FOUND_MESSAGE: Final[str] = "Unable to find `flow` executable."


class FlowcovError(Exception):
    """Base class for every error raised by :mod:`flowcov`."""


class ConfigError(FlowcovError):
    """Raised when configuration input is invalid."""


class ExecutableNotFoundError(FlowcovError):
    """Raised when the checker binary cannot be spawned."""

    def __init__(self, executable: str) -> None:
        """Record the executable that could not be located.

        Args:
            executable: Command name or path that failed to spawn.
        """

        super().__init__(f"Executable '{executable}' was not found")
        self.executable = executable


class WorkingDirectoryError(FlowcovError):
    """Raised when the checker's working directory does not exist."""

    def __init__(self, cwd: Path) -> None:
        super().__init__(f"Working directory '{cwd}' does not exist")
        self.cwd = cwd


class CheckerInvocationError(FlowcovError):
    """Raised when the checker process fails to produce usable output."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Initialise the error with captured subprocess metadata.

        The exception message is the checker's stderr so callers can search it
        for status markers.

        Args:
            command: Command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """

        text = (stderr or "").strip() or f"Command '{command[0]}' exited with status {returncode}"
        super().__init__(text)
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CheckerTimeoutError(FlowcovError):
    """Raised when the checker does not finish within its timeout."""

    def __init__(self, command: Sequence[str], timeout: float) -> None:
        super().__init__(f"Command '{command[0]}' timed out after {timeout:.1f}s")
        self.command = tuple(command)
        self.timeout = timeout


class CoverageParseError(FlowcovError):
    """Raised when checker output is not a valid coverage report."""


class LintError(FlowcovError):
    """User-facing failure reported to the host for a single lint call."""


__all__ = [
    "EXECUTABLE_NOT_FOUND_MESSAGE",
    "CheckerInvocationError",
    "CheckerTimeoutError",
    "ConfigError",
    "CoverageParseError",
    "ExecutableNotFoundError",
    "FlowcovError",
    "LintError",
    "WorkingDirectoryError",
]
