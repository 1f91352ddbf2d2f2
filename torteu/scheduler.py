"""
Daily rollover timer.

A one-shot sleep until the next civil midnight, re-armed after every
firing. Runs on the asyncio loop and is cancelled on teardown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .clock import Clock

logger = logging.getLogger(__name__)


class RolloverScheduler:
    """
    Calls on_rollover once per civil-day boundary while running.

    Args:
        clock: Source of the delay until the next boundary
        on_rollover: Coroutine function that resets the game for the new day
    """

    def __init__(self, clock: Clock, on_rollover: Callable[[], Awaitable[None]]):
        self.clock = clock
        self.on_rollover = on_rollover
        self._task: Optional[asyncio.Task] = None
        self.fired = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the timer; must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="torteu-rollover")

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            delay_ms = self.clock.ms_until_next_midnight()
            logger.debug(f"Next rollover in {delay_ms} ms")
            # A 0 ms delay still yields once before firing
            await asyncio.sleep(delay_ms / 1000)
            await self.fire()

    async def fire(self) -> None:
        """
        Run one rollover. Errors are logged and the loop keeps going so the
        following boundary is still honoured.
        """
        self.fired += 1
        logger.info(f"Civil day rolled over to {self.clock.today().isoformat()}")
        try:
            await self.on_rollover()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Rollover failed")
