# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous wrapper around checker subprocess execution."""

from __future__ import annotations

import asyncio
import contextlib
import logging

# Bandit: subprocess usage is intentional; commands are argument lists without shell expansion.
import subprocess  # nosec B404
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .errors import CheckerInvocationError, CheckerTimeoutError, ExecutableNotFoundError, WorkingDirectoryError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final[float] = 60.0


@dataclass(slots=True)
class CommandOptions:
    """Execution options for a single checker invocation.

    Attributes:
        cwd: Working directory for the child process.
        env: Environment override; ``None`` inherits the current environment.
        timeout: Seconds before the child is killed, ``None`` disables it.
        ignore_exit_code: Treat a non-zero exit as success when stdout exists.
        detached: Start the child in its own session.
        unique_key: Newer invocations sharing this key supersede older ones.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    ignore_exit_code: bool = False
    detached: bool = False
    unique_key: str | None = None


Invoker = Callable[[str, Sequence[str], CommandOptions], Awaitable[str | None]]


@dataclass(slots=True, eq=False)
class _Invocation:
    process: asyncio.subprocess.Process
    superseded: bool = field(default=False)


_ACTIVE: dict[str, _Invocation] = {}


def _decode(value: bytes | None) -> str:
    if not value:
        return ""
    return value.decode(errors="ignore")


def _supersede(key: str, current: _Invocation) -> None:
    previous = _ACTIVE.get(key)
    _ACTIVE[key] = current
    if previous is None:
        return
    previous.superseded = True
    if previous.process.returncode is None:
        LOGGER.debug("superseding running invocation for %s", key)
        try:
            previous.process.kill()
        except ProcessLookupError:
            pass


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass


async def run_checker(
    executable: str,
    args: Sequence[str],
    options: CommandOptions | None = None,
) -> str | None:
    """Run ``executable`` with ``args`` and return its stdout.

    Args:
        executable: Command name or path of the checker.
        args: Arguments passed to the checker.
        options: Execution options; defaults to :class:`CommandOptions`.

    Returns:
        str | None: Captured stdout, or ``None`` when a newer invocation with
        the same ``unique_key`` superseded this one.

    Raises:
        ExecutableNotFoundError: If ``executable`` cannot be spawned.
        WorkingDirectoryError: If ``options.cwd`` is not an existing directory.
        CheckerTimeoutError: If the child outlives ``options.timeout``.
        CheckerInvocationError: If the child produced only stderr output, or
            exited non-zero while exit codes are not ignored.
    """

    resolved = options or CommandOptions()
    command = [executable, *args]
    LOGGER.debug("running %s in %s", command, resolved.cwd)
    if resolved.cwd is not None and not Path(resolved.cwd).is_dir():
        raise WorkingDirectoryError(Path(resolved.cwd))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(resolved.cwd) if resolved.cwd is not None else None,
            env=dict(resolved.env) if resolved.env is not None else None,
            start_new_session=resolved.detached,
        )
    except FileNotFoundError as exc:
        raise ExecutableNotFoundError(executable) from exc

    invocation = _Invocation(process)
    if resolved.unique_key is not None:
        _supersede(resolved.unique_key, invocation)
    try:
        stdout_raw, stderr_raw = await asyncio.wait_for(process.communicate(), timeout=resolved.timeout)
    except asyncio.TimeoutError as exc:
        _kill(process)
        await process.wait()
        raise CheckerTimeoutError(command, resolved.timeout or 0.0) from exc
    except asyncio.CancelledError:
        _kill(process)
        with contextlib.suppress(asyncio.CancelledError):
            await process.wait()
        raise
    finally:
        if resolved.unique_key is not None and _ACTIVE.get(resolved.unique_key) is invocation:
            del _ACTIVE[resolved.unique_key]

    if invocation.superseded:
        LOGGER.debug("discarding superseded output for %s", resolved.unique_key)
        return None

    stdout = _decode(stdout_raw)
    stderr = _decode(stderr_raw)
    returncode = process.returncode
    if not resolved.ignore_exit_code and returncode != 0:
        raise CheckerInvocationError(command, returncode, stdout, stderr)
    if not stdout.strip() and stderr.strip():
        raise CheckerInvocationError(command, returncode, stdout, stderr)
    return stdout


__all__ = ["DEFAULT_TIMEOUT", "CommandOptions", "Invoker", "run_checker"]
