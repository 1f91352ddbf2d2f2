from __future__ import annotations
import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from .puzzle import Category, Puzzle


class Status(str, Enum):
    IN_PROGRESS = "in-progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not Status.IN_PROGRESS


class Outcome(str, Enum):
    """Result of one submit()."""
    DUPLICATE = "duplicate"
    CORRECT = "correct"
    WIN = "win"
    ONE_AWAY = "one-away"
    INCORRECT = "incorrect"
    LOSS = "loss"


@dataclass
class Item:
    text: str
    level: int
    selected: bool = False


@dataclass
class Session:
    """Mutable state of one day's game."""
    puzzle_id: str
    date: dt.date
    status: Status = Status.IN_PROGRESS
    items: List[Item] = field(default_factory=list)
    cleared_categories: List[Category] = field(default_factory=list)
    guess_history: List[Tuple[Item, ...]] = field(default_factory=list)
    mistakes_remaining: int = 4

    @staticmethod
    def fresh(puzzle: Puzzle, date: dt.date, max_mistakes: int = 4) -> "Session":
        """New in-progress session with every item of the puzzle in level order."""
        items = [Item(text, c.level) for c in puzzle.categories for text in c.items]
        return Session(puzzle_id=puzzle.puzzle_id, date=date, items=items, mistakes_remaining=max_mistakes)

    @property
    def selected(self) -> List[Item]:
        return [item for item in self.items if item.selected]


# Persisted record (storage key -> JSON object):
#   {date, status, clearedCategories, guessHistory, mistakesRemaining, gameWords, puzzleId}

def session_to_record(session: Session) -> Dict[str, Any]:
    return {
        "date": session.date.isoformat(),
        "status": session.status.value,
        "clearedCategories": [c.to_dict() for c in session.cleared_categories],
        "guessHistory": [
            [{"text": item.text, "level": item.level} for item in guess]
            for guess in session.guess_history
        ],
        "mistakesRemaining": session.mistakes_remaining,
        "gameWords": [
            {"text": item.text, "level": item.level, "selected": item.selected}
            for item in session.items
        ],
        "puzzleId": session.puzzle_id,
    }


def _item_from_record(data: Dict[str, Any], with_selection: bool) -> Item:
    text = data["text"]
    level = data["level"]
    if not isinstance(text, str) or not isinstance(level, int):
        raise ValueError(f"Malformed item: {data!r}")
    selected = bool(data.get("selected", False)) if with_selection else False
    return Item(text=text, level=level, selected=selected)


def session_from_record(data: Any) -> Session:
    """
    Rebuild a Session from its persisted record.

    Raises:
        ValueError: If the record's shape is invalid (KeyError/TypeError are
                    normalised to ValueError)
    """
    if not isinstance(data, dict):
        raise ValueError("Session record must be an object")
    try:
        status = Status(data["status"])
        raw_date = data["date"]
        puzzle_id = data["puzzleId"]
        if not isinstance(raw_date, str):
            raise ValueError(f"date must be a string: {raw_date!r}")
        if not isinstance(puzzle_id, str) or not puzzle_id:
            raise ValueError("puzzleId must be a non-empty string")
        mistakes = data["mistakesRemaining"]
        if not isinstance(mistakes, int) or isinstance(mistakes, bool) or mistakes < 0:
            raise ValueError(f"mistakesRemaining must be a non-negative integer: {mistakes!r}")

        return Session(
            puzzle_id=puzzle_id,
            date=dt.date.fromisoformat(raw_date),
            status=status,
            items=[_item_from_record(i, with_selection=True) for i in data.get("gameWords", [])],
            cleared_categories=[Category.from_dict(c) for c in data.get("clearedCategories", [])],
            guess_history=[
                tuple(_item_from_record(i, with_selection=False) for i in guess)
                for guess in data.get("guessHistory", [])
            ],
            mistakes_remaining=mistakes,
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed session record: {e}") from e
