"""Cancellable repeating background task for in-memory housekeeping."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run a synchronous callable every ``interval_seconds`` on the event loop.

    ``func`` runs to completion inside each tick, so ticks never overlap. An
    exception from ``func`` is logged and the next tick is still scheduled.
    """

    def __init__(self, name: str, interval_seconds: float, func: Callable[[], Any]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.name = name
        self.interval_seconds = interval_seconds
        self._func = func
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop (no-op if already running)."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(
            "periodic_task.started",
            extra={"task": self.name, "interval_s": self.interval_seconds},
        )

    async def stop(self) -> None:
        """Cancel the loop and wait until it has exited."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("periodic_task.stopped", extra={"task": self.name})

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self._func()
            except Exception:
                logger.exception("periodic_task.failed", extra={"task": self.name})
