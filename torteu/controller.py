"""
App lifecycle: puzzle acquisition, session resume, daily rollover.

The presentation layer holds one GameController, reads ``engine`` (None
while no puzzle is available) and calls the engine's public operations.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Optional

from .clock import Clock
from .core.env import Settings
from .engine import GameEngine
from .errors import FetchError, ParseError
from .puzzle import Puzzle
from .puzzle_cache import DailyPuzzleSource
from .scheduler import RolloverScheduler
from .session_store import FileSessionStore, SessionStore
from .sources import get_source_for_url

logger = logging.getLogger(__name__)


class GameController:
    def __init__(
        self,
        clock: Clock,
        puzzles: DailyPuzzleSource,
        store: SessionStore,
        rng: Optional[random.Random] = None,
        max_mistakes: int = 4,
        reveal_delay: float = 1.0,
    ):
        self.clock = clock
        self.puzzles = puzzles
        self.store = store
        self.rng = rng or random.Random()
        self.max_mistakes = max_mistakes
        self.reveal_delay = reveal_delay
        self.engine: Optional[GameEngine] = None
        self.last_error: Optional[Exception] = None
        self.scheduler = RolloverScheduler(clock, self.rollover)

    @classmethod
    def from_settings(cls, settings: Settings, rng: Optional[random.Random] = None) -> "GameController":
        """Wire clock, sheet source, file store and timer from configuration."""
        rng = rng or random.Random()
        clock = Clock(settings.timezone)
        source = get_source_for_url(settings.puzzle_url, timeout=settings.fetch_timeout)
        return cls(
            clock,
            DailyPuzzleSource(source, clock, rng),
            FileSessionStore(settings.state_dir),
            rng=rng,
            max_mistakes=settings.max_mistakes,
            reveal_delay=settings.reveal_delay,
        )

    async def start(self) -> Optional[GameEngine]:
        """Load today's puzzle, resume or create the session, arm the rollover timer."""
        puzzle = await self._load_puzzle(force_refresh=False)
        if puzzle is not None:
            self._bind(puzzle)
        self.scheduler.start()
        return self.engine

    async def rollover(self) -> None:
        """Discard the saved session and start over on a freshly fetched puzzle."""
        self.store.clear()
        self.engine = None
        puzzle = await self._load_puzzle(force_refresh=True)
        if puzzle is not None:
            self._bind(puzzle)

    async def resume(self) -> None:
        """Catch a civil-day boundary missed while suspended; also reloads when no puzzle is bound."""
        if self.engine is None or self.engine.session.date != self.clock.today():
            logger.info("Day changed while suspended")
            await self.rollover()

    async def play_out_loss(self) -> None:
        """Reveal the unsolved categories one by one, then finish the loss."""
        engine = self._require_engine()
        for category in engine.resolve_loss():
            await asyncio.sleep(self.reveal_delay)
            engine.reveal_category(category)
        await asyncio.sleep(self.reveal_delay)
        engine.finish_loss()

    async def play_out_win(self) -> None:
        engine = self._require_engine()
        await asyncio.sleep(self.reveal_delay)
        engine.resolve_win()

    def close(self) -> None:
        """Teardown: stop the rollover timer."""
        self.scheduler.cancel()

    async def _load_puzzle(self, force_refresh: bool) -> Optional[Puzzle]:
        try:
            puzzle = await self.puzzles.fetch_daily_puzzle(force_refresh=force_refresh)
        except (FetchError, ParseError) as e:
            logger.error(f"Failed to load puzzle data: {e}")
            self.last_error = e
            return None
        self.last_error = None
        return puzzle

    def _bind(self, puzzle: Puzzle) -> None:
        today = self.clock.today()
        session = self.store.load(puzzle.puzzle_id, today)
        if session is not None:
            if session.status.is_terminal:
                session.items = []
            self.engine = GameEngine(puzzle, session, store=self.store, rng=self.rng)
        else:
            self.engine = GameEngine.new_game(
                puzzle, today, store=self.store, rng=self.rng, max_mistakes=self.max_mistakes
            )
            self.store.save(self.engine.session)

    def _require_engine(self) -> GameEngine:
        if self.engine is None:
            raise RuntimeError("No puzzle loaded")
        return self.engine
