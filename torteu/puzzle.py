from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .errors import ParseError

LEVELS = (1, 2, 3, 4)
ITEMS_PER_CATEGORY = 4


@dataclass(frozen=True)
class Category:
    """One hidden group: a name, its difficulty level and exactly 4 item texts."""
    name: str
    items: Tuple[str, ...]
    level: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "items": list(self.items), "level": self.level}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Category":
        try:
            name = data["name"]
            items = data["items"]
            level = data["level"]
        except (KeyError, TypeError) as e:
            raise ParseError(f"Malformed category: {data!r}") from e
        if not isinstance(name, str) or not name:
            raise ParseError(f"Category name must be a non-empty string: {name!r}")
        if not isinstance(items, list) or len(items) != ITEMS_PER_CATEGORY:
            raise ParseError(f"Category {name!r} must have exactly {ITEMS_PER_CATEGORY} items")
        if not all(isinstance(i, str) and i for i in items):
            raise ParseError(f"Category {name!r} has a non-string item")
        if level not in LEVELS or isinstance(level, bool):
            raise ParseError(f"Category {name!r} has invalid level {level!r}")
        return Category(name=name, items=tuple(items), level=level)


def build_puzzle_id(categories: List[Category]) -> str:
    """
    Content-derived identity: level, name and items of every category, in level order.

    Example:
        1:FRUIT:APPLE:PEAR:PLUM:FIG|2:...
    """
    ordered = sorted(categories, key=lambda c: c.level)
    return "|".join(
        ":".join([str(c.level), c.name, *c.items]) for c in ordered
    )


def validate_categories(categories: List[Category]) -> None:
    """Check the partition invariants: one category per level, 16 globally unique items."""
    if sorted(c.level for c in categories) != list(LEVELS):
        raise ParseError(f"Expected one category per level {LEVELS}, got {[c.level for c in categories]}")
    texts = [t for c in categories for t in c.items]
    if len(set(texts)) != len(texts):
        dupes = sorted({t for t in texts if texts.count(t) > 1})
        raise ParseError(f"Duplicate items across categories: {dupes}")


@dataclass(frozen=True)
class Puzzle:
    categories: Tuple[Category, ...]
    puzzle_id: str
    day_index: int

    @staticmethod
    def build(categories: List[Category], day_index: int) -> "Puzzle":
        validate_categories(categories)
        ordered = tuple(sorted(categories, key=lambda c: c.level))
        return Puzzle(categories=ordered, puzzle_id=build_puzzle_id(list(ordered)), day_index=day_index)

    def category_for(self, text: str) -> Category | None:
        for category in self.categories:
            if text in category.items:
                return category
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape served by the puzzle endpoint."""
        return {
            "categories": [c.to_dict() for c in self.categories],
            "puzzleId": self.puzzle_id,
            "dayIndex": self.day_index,
        }

    @staticmethod
    def from_dict(data: Any) -> "Puzzle":
        """
        Rebuild a Puzzle from the endpoint's JSON.

        The id is recomputed from content; a mismatching ``puzzleId`` in the
        payload is rejected.

        Raises:
            ParseError: If the payload shape or the partition is invalid
        """
        if not isinstance(data, dict):
            raise ParseError("Puzzle payload must be an object")
        raw_categories = data.get("categories")
        if not isinstance(raw_categories, list) or len(raw_categories) != len(LEVELS):
            raise ParseError(f"Puzzle payload must carry exactly {len(LEVELS)} categories")
        day_index = data.get("dayIndex")
        if not isinstance(day_index, int) or isinstance(day_index, bool):
            raise ParseError(f"dayIndex must be an integer: {day_index!r}")

        puzzle = Puzzle.build([Category.from_dict(c) for c in raw_categories], day_index)
        claimed = data.get("puzzleId")
        if claimed is not None and claimed != puzzle.puzzle_id:
            raise ParseError("puzzleId does not match puzzle content")
        return puzzle
