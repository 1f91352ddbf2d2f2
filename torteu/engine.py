"""
Game engine for one day's puzzle.

Owns the authoritative Session and implements selection, submission,
mistake accounting and the won/lost transitions. Every operation runs to
completion synchronously.
"""

from __future__ import annotations

import datetime as dt
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import PreconditionError
from .puzzle import ITEMS_PER_CATEGORY, Category, Puzzle
from .session import Item, Outcome, Session, Status
from .session_store import SessionStore
from .utils import best_match, shuffled

logger = logging.getLogger(__name__)

MAX_SELECTED = 4


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view handed to the presentation layer."""
    items: Tuple[Item, ...]
    selected: Tuple[Item, ...]
    cleared_categories: Tuple[Category, ...]
    mistakes_remaining: int
    is_won: bool
    is_lost: bool
    guess_history: Tuple[Tuple[Item, ...], ...]


class GameEngine:
    """
    Selection and scoring over a Session bound to a Puzzle.

    Args:
        puzzle: The puzzle the session belongs to
        session: Session to drive; must carry the puzzle's id
        store: Where the session is persisted after each scoring step (optional)
        rng: Random source for shuffling
    """

    def __init__(
        self,
        puzzle: Puzzle,
        session: Session,
        store: Optional[SessionStore] = None,
        rng: Optional[random.Random] = None,
    ):
        if session.puzzle_id != puzzle.puzzle_id:
            raise ValueError("Session does not belong to this puzzle")
        self.puzzle = puzzle
        self.session = session
        self.store = store
        self.rng = rng or random.Random()
        self._groups = [frozenset(c.items) for c in puzzle.categories]

    @classmethod
    def new_game(
        cls,
        puzzle: Puzzle,
        date: dt.date,
        store: Optional[SessionStore] = None,
        rng: Optional[random.Random] = None,
        max_mistakes: int = 4,
    ) -> "GameEngine":
        """Fresh in-progress session with a shuffled board."""
        engine = cls(puzzle, Session.fresh(puzzle, date, max_mistakes), store=store, rng=rng)
        engine.shuffle()
        return engine

    # ── Read side ─────────────────────────────────────────────────────────────

    @property
    def status(self) -> Status:
        return self.session.status

    def snapshot(self) -> GameSnapshot:
        s = self.session
        items = tuple(Item(i.text, i.level, i.selected) for i in s.items)
        return GameSnapshot(
            items=items,
            selected=tuple(i for i in items if i.selected),
            cleared_categories=tuple(s.cleared_categories),
            mistakes_remaining=s.mistakes_remaining,
            is_won=s.status is Status.WON,
            is_lost=s.status is Status.LOST,
            guess_history=tuple(tuple(Item(i.text, i.level) for i in g) for g in s.guess_history),
        )

    def remaining_categories(self) -> List[Category]:
        """Categories not yet cleared, in level order."""
        return [c for c in self.puzzle.categories if c not in self.session.cleared_categories]

    # ── Board operations ──────────────────────────────────────────────────────

    def select(self, text: str) -> None:
        """
        Toggle selection of one item.

        Unknown texts are ignored. Selecting a fifth item is a no-op; an
        existing selection is never displaced.
        """
        item = self._find(text)
        if item is None:
            return
        if item.selected:
            item.selected = False
        elif len(self.session.selected) < MAX_SELECTED:
            item.selected = True

    def deselect_all(self) -> None:
        for item in self.session.items:
            item.selected = False

    def shuffle(self) -> None:
        self.session.items = shuffled(self.session.items, self.rng)

    # ── Scoring ───────────────────────────────────────────────────────────────

    def submit(self) -> Outcome:
        """
        Score the current selection.

        Returns:
            DUPLICATE if this exact set was guessed before (nothing changes),
            CORRECT / WIN on a full category, ONE_AWAY / INCORRECT / LOSS otherwise

        Raises:
            PreconditionError: If the game is over or exactly 4 items are not selected
        """
        if self.session.status.is_terminal:
            raise PreconditionError(f"Game already {self.session.status.value}")
        selected = self.session.selected
        if len(selected) != ITEMS_PER_CATEGORY:
            raise PreconditionError(f"Exactly {ITEMS_PER_CATEGORY} items must be selected, got {len(selected)}")

        guess = frozenset(item.text for item in selected)
        if any(frozenset(i.text for i in g) == guess for g in self.session.guess_history):
            return Outcome.DUPLICATE

        self.session.guess_history.append(tuple(Item(i.text, i.level) for i in selected))

        index, likeness = best_match(guess, self._groups)
        if likeness == ITEMS_PER_CATEGORY:
            outcome = self._clear(self.puzzle.categories[index])
        else:
            outcome = self._miss(likeness)

        self._persist()
        return outcome

    def _clear(self, category: Category) -> Outcome:
        s = self.session
        s.cleared_categories.append(category)
        s.items = [i for i in s.items if i.text not in category.items]
        if len(s.cleared_categories) == len(self.puzzle.categories):
            s.status = Status.WON
            logger.info("Puzzle solved")
            return Outcome.WIN
        return Outcome.CORRECT

    def _miss(self, likeness: int) -> Outcome:
        s = self.session
        s.mistakes_remaining = max(s.mistakes_remaining - 1, 0)
        if s.mistakes_remaining == 0:
            s.status = Status.LOST
            logger.info("Out of mistakes")
            return Outcome.LOSS
        if likeness == ITEMS_PER_CATEGORY - 1:
            return Outcome.ONE_AWAY
        return Outcome.INCORRECT

    # ── End of game ───────────────────────────────────────────────────────────

    def resolve_loss(self) -> List[Category]:
        """
        Deselect everything and return the unsolved categories in level
        order, for the caller to reveal one at a time.
        """
        self.deselect_all()
        return self.remaining_categories()

    def reveal_category(self, category: Category) -> None:
        """Take a revealed category's items off the board (not counted as cleared)."""
        self.session.items = [i for i in self.session.items if i.text not in category.items]
        self._persist()

    def finish_loss(self) -> None:
        """Fix the lost status; idempotent once lost."""
        if self.session.status is Status.WON:
            raise PreconditionError("Cannot lose a won game")
        if self.session.status is not Status.LOST:
            self.session.status = Status.LOST
        self._persist()

    def resolve_win(self) -> None:
        """Confirm the won status; idempotent once won."""
        if len(self.session.cleared_categories) != len(self.puzzle.categories):
            raise PreconditionError("Not every category is cleared")
        if self.session.status is not Status.WON:
            self.session.status = Status.WON
            self._persist()

    # ── Internals ─────────────────────────────────────────────────────────────

    def _find(self, text: str) -> Optional[Item]:
        for item in self.session.items:
            if item.text == text:
                return item
        return None

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.session)
