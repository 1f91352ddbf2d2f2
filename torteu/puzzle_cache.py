"""
Memoized access to today's puzzle.

Concurrent callers share one in-flight request. A failed refresh leaves
the previously cached puzzle in place.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import random
from typing import Optional

from .clock import Clock
from .puzzle import Puzzle
from .sources.base_source import PuzzleSource

logger = logging.getLogger(__name__)


def _retrieve_exception(task: asyncio.Future) -> None:
    # _resolve already logged it; waiters may all have been cancelled
    if not task.cancelled():
        task.exception()


class DailyPuzzleSource:
    """Owns the puzzle cache and the in-flight fetch for one process."""

    def __init__(self, source: PuzzleSource, clock: Clock, rng: Optional[random.Random] = None):
        self.source = source
        self.clock = clock
        self.rng = rng
        self._cached: Optional[Puzzle] = None
        self._cached_on: Optional[dt.date] = None
        self._in_flight: Optional[asyncio.Future] = None
        self._generation = 0

    @property
    def cached(self) -> Optional[Puzzle]:
        return self._cached

    def reset(self) -> None:
        """Drop the cache and forget any in-flight request."""
        self._generation += 1
        self._cached = None
        self._cached_on = None
        self._in_flight = None

    async def fetch_daily_puzzle(self, force_refresh: bool = False) -> Puzzle:
        """
        Return today's puzzle, fetching it at most once per civil day.

        Args:
            force_refresh: Bypass the memoized puzzle

        Raises:
            FetchError: If the transport fails
            ParseError: If the payload is malformed (NoPuzzleAvailable when no row is usable)
        """
        if not force_refresh and self._cached is not None and self._cached_on == self.clock.today():
            return self._cached

        if self._in_flight is None:
            self._in_flight = asyncio.ensure_future(self._resolve())
            self._in_flight.add_done_callback(_retrieve_exception)
        # shield: a cancelled waiter must not cancel the shared request
        return await asyncio.shield(self._in_flight)

    async def _resolve(self) -> Puzzle:
        today = self.clock.today()
        task = asyncio.current_task()
        generation = self._generation
        try:
            puzzle = await self.source.load(self.clock.day_of_year(), self.rng)
        except Exception as e:
            logger.error(f"Failed to load puzzle data: {e}")
            raise
        finally:
            if self._in_flight is task:
                self._in_flight = None
        if generation != self._generation:
            # reset() ran while this request was pending
            return puzzle
        self._cached = puzzle
        self._cached_on = today
        logger.info(f"Loaded puzzle for day {puzzle.day_index} ({today.isoformat()})")
        return puzzle
