"""
ditup_api.jobs.runner

Run a coroutine function at a fixed interval in a background asyncio task.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

from ditup_api.observability.logging import get_logger

log = get_logger(__name__)


class PeriodicJob:
    def __init__(self, *, name: str, interval: float, func: Callable[[], Awaitable[Any]]) -> None:
        self.name = name
        self._interval = interval
        self._func = func
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop(), name=self.name)
            log.info("job_started", job=self.name, interval=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("job_stopped", job=self.name)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._func()
            except Exception:
                # One failed run must not end the schedule; the next run retries.
                log.exception("job_failed", job=self.name)
