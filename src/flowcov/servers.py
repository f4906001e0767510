# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Track checker servers started by lint calls and stop them on shutdown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from .process import DEFAULT_TIMEOUT, CommandOptions, Invoker, run_checker

LOGGER = logging.getLogger(__name__)

ExecutableResolver = Callable[[Path], str]


class SpawnedServers:
    """Set of project roots whose checker server was started as a side effect."""

    def __init__(self) -> None:
        self._roots: set[Path] = set()
        self._pending: set[asyncio.Task[None]] = set()

    def add(self, root: Path) -> None:
        if root not in self._roots:
            LOGGER.debug("recording spawned flow server for %s", root)
        self._roots.add(root)

    def __contains__(self, root: object) -> bool:
        return root in self._roots

    def __iter__(self) -> Iterator[Path]:
        return iter(sorted(self._roots))

    def __len__(self) -> int:
        return len(self._roots)

    @property
    def pending(self) -> tuple[asyncio.Task[None], ...]:
        """Stop commands scheduled by :meth:`stop_all_nowait` that are still running."""
        return tuple(self._pending)

    async def stop_all(
        self,
        resolve_executable: ExecutableResolver,
        *,
        invoker: Invoker = run_checker,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Issue a best-effort ``stop`` for every recorded root and wait for it.

        Every failure is logged and discarded; this never raises. The registry
        is emptied before the stop commands run.

        Args:
            resolve_executable: Maps a root directory to the checker command.
            invoker: Coroutine used to run the checker.
            timeout: Per-command timeout in seconds.
        """

        self.stop_all_nowait(resolve_executable, invoker=invoker, timeout=timeout)
        await self.wait_pending()

    def stop_all_nowait(
        self,
        resolve_executable: ExecutableResolver,
        *,
        invoker: Invoker = run_checker,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> list[asyncio.Task[None]]:
        """Schedule a ``stop`` for every recorded root without waiting on it.

        Must be called from a running event loop. Failures are logged and
        discarded by each task. The registry is emptied immediately.

        Returns:
            list[asyncio.Task[None]]: The scheduled stop tasks.
        """

        roots = list(self)
        self._roots.clear()
        loop = asyncio.get_running_loop()
        tasks: list[asyncio.Task[None]] = []
        for root in roots:
            task = loop.create_task(_stop_one(root, resolve_executable, invoker, timeout))
            self._pending.add(task)
            task.add_done_callback(self._stop_finished)
            tasks.append(task)
        return tasks

    async def wait_pending(self) -> None:
        """Wait for scheduled stop commands; failures are logged by each task."""

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _stop_finished(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            LOGGER.debug("flow server stop was cancelled")


async def _stop_one(root: Path, resolve_executable: ExecutableResolver, invoker: Invoker, timeout: float) -> None:
    options = CommandOptions(cwd=root, timeout=timeout, detached=True, ignore_exit_code=True)
    try:
        await invoker(resolve_executable(root), ["stop"], options)
    except Exception as exc:  # shutdown is best effort
        LOGGER.debug("ignoring failure stopping flow server in %s: %s", root, exc)


__all__ = ["SpawnedServers"]
