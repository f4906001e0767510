# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Re-issue checker requests while the checker is starting or rechecking."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

from .errors import EXECUTABLE_NOT_FOUND_MESSAGE, ExecutableNotFoundError, FlowcovError, LintError
from .process import CommandOptions, Invoker, run_checker
from .servers import SpawnedServers

LOGGER = logging.getLogger(__name__)

INIT_MESSAGE: Final[str] = "flow server"
RECHECKING_MESSAGE: Final[str] = "flow is"


class LintState(str, Enum):
    """States a coverage request moves through."""

    IDLE = "idle"
    REQUESTING = "requesting"
    TRANSIENT_BUSY = "transient_busy"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


def is_server_starting(text: str) -> bool:
    return INIT_MESSAGE in text


def is_transient_busy(text: str) -> bool:
    """Return ``True`` when ``text`` says the checker is starting or rechecking."""

    return INIT_MESSAGE in text or RECHECKING_MESSAGE in text


@dataclass(slots=True)
class CoverageRequest:
    """A single checker request that retries through transient-busy replies.

    There is no retry limit or backoff; the checker leaving its busy state
    terminates the loop. ``is_cancelled`` is consulted before every retry so
    a stale request stops instead of spinning.

    Attributes:
        executable: Checker command to run.
        args: Arguments passed to the checker.
        options: Invocation options shared by every attempt.
        config_file: Project marker found for the document, if any.
        servers: Registry receiving roots whose server this request started.
        invoker: Coroutine used to run the checker.
        is_cancelled: Predicate reporting that the request became stale.
    """

    executable: str
    args: Sequence[str]
    options: CommandOptions
    config_file: Path | None = None
    servers: SpawnedServers | None = None
    invoker: Invoker = run_checker
    is_cancelled: Callable[[], bool] | None = None
    state: LintState = field(default=LintState.IDLE, init=False)
    attempts: int = field(default=0, init=False)

    async def run(self) -> str | None:
        """Invoke the checker until it answers.

        Returns:
            str | None: Checker stdout, or ``None`` when the invocation was
            superseded or the request was cancelled.

        Raises:
            LintError: If the checker executable cannot be found.
            FlowcovError: Any other invocation failure, unchanged.
        """

        while True:
            self.state = LintState.REQUESTING
            self.attempts += 1
            try:
                output = await self.invoker(self.executable, self.args, self.options)
            except ExecutableNotFoundError as exc:
                self.state = LintState.FAILED
                raise LintError(EXECUTABLE_NOT_FOUND_MESSAGE) from exc
            except FlowcovError as exc:
                message = str(exc)
                if not is_transient_busy(message):
                    self.state = LintState.FAILED
                    raise
                self.state = LintState.TRANSIENT_BUSY
                if is_server_starting(message) and self.config_file is not None and self.servers is not None:
                    self.servers.add(self.config_file.parent)
                if self.is_cancelled is not None and self.is_cancelled():
                    LOGGER.debug("abandoning cancelled request after %d attempt(s)", self.attempts)
                    self.state = LintState.CANCELLED
                    return None
                LOGGER.debug("checker busy (%s); retrying", message.splitlines()[0] if message else "")
                continue
            self.state = LintState.SUCCEEDED
            return output


__all__ = [
    "INIT_MESSAGE",
    "RECHECKING_MESSAGE",
    "CoverageRequest",
    "LintState",
    "is_server_starting",
    "is_transient_busy",
]
