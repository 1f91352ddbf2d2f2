"""
Parsing of the published puzzle sheet.

One row per candidate day: ``day_of_year, L1, L2, L3, L4`` where each
category cell reads ``NAME(item1, item2, item3, item4[, extra...])``.
"""

from __future__ import annotations

import io
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .errors import NoPuzzleAvailable, ParseError
from .puzzle import ITEMS_PER_CATEGORY, LEVELS, Category, Puzzle, validate_categories
from .utils import normalize_text

logger = logging.getLogger(__name__)

MIN_DAY = 1
MAX_DAY = 366
# day column plus one cell per level
SHEET_COLUMNS = 1 + len(LEVELS)


@dataclass(frozen=True)
class PuzzleRow:
    day_of_year: int
    categories: List[Category]


def parse_category_cell(value: Optional[str], level: int) -> Category:
    """
    Parse one ``NAME(a, b, c, d)`` cell.

    Only the first 4 non-empty items are kept.

    Raises:
        ParseError: On missing parentheses, missing name or fewer than 4 items
    """
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"Level {level}: empty cell")
    trimmed = value.strip()

    open_idx = trimmed.find("(")
    close_idx = trimmed.rfind(")")
    if open_idx == -1 or close_idx == -1 or close_idx <= open_idx:
        raise ParseError(f"Level {level}: unbalanced parentheses in {trimmed!r}")

    name = trimmed[:open_idx].strip()
    section = trimmed[open_idx + 1:close_idx].strip()
    if not name or not section:
        raise ParseError(f"Level {level}: missing name or items in {trimmed!r}")

    raw_items = [item.strip() for item in section.split(",")]
    raw_items = [item for item in raw_items if item]
    if len(raw_items) < ITEMS_PER_CATEGORY:
        raise ParseError(f"Level {level}: expected {ITEMS_PER_CATEGORY} items, got {len(raw_items)}")

    return Category(
        name=normalize_text(name),
        items=tuple(normalize_text(item) for item in raw_items[:ITEMS_PER_CATEGORY]),
        level=level,
    )


def _parse_day(value: object) -> int:
    if not isinstance(value, str):
        raise ParseError("missing day column")
    try:
        day = int(value.strip())
    except ValueError as e:
        raise ParseError(f"day column is not an integer: {value!r}") from e
    if day < MIN_DAY or day > MAX_DAY:
        raise ParseError(f"day {day} outside {MIN_DAY}..{MAX_DAY}")
    return day


def parse_row(cells: List[object]) -> PuzzleRow:
    """Parse one sheet row; raises ParseError if any part is invalid."""
    day = _parse_day(cells[0] if cells else None)
    padded = list(cells[1:1 + len(LEVELS)]) + [None] * len(LEVELS)
    categories = [parse_category_cell(padded[i], level) for i, level in enumerate(LEVELS)]
    validate_categories(categories)
    return PuzzleRow(day_of_year=day, categories=categories)


def parse_sheet(text: str) -> List[PuzzleRow]:
    """
    Parse the CSV export into valid rows, dropping malformed ones.

    Quoted cells may contain commas; a doubled quote is a literal quote.
    Only the first SHEET_COLUMNS cells of a line are read, whatever the
    width of the other lines.
    """
    if not text or not text.strip():
        return []
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(SHEET_COLUMNS)),
            usecols=list(range(SHEET_COLUMNS)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            on_bad_lines="skip",
            engine="python",
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        logger.warning(f"Puzzle sheet could not be tokenised: {e}")
        return []

    rows: List[PuzzleRow] = []
    for line_no, cells in enumerate(df.itertuples(index=False, name=None), start=1):
        try:
            rows.append(parse_row(list(cells)))
        except ParseError as e:
            logger.debug(f"Dropping sheet row {line_no}: {e}")
    return rows


def select_daily_row(rows: List[PuzzleRow], day_of_year: int, rng: Optional[random.Random] = None) -> PuzzleRow:
    """
    Pick today's row, or a uniformly random valid row if none matches the day.

    Raises:
        NoPuzzleAvailable: If rows is empty
    """
    if not rows:
        raise NoPuzzleAvailable("No valid puzzle rows found in sheet")
    for row in rows:
        if row.day_of_year == day_of_year:
            return row
    chosen = (rng or random).choice(rows)
    logger.warning(f"No puzzle for day {day_of_year}; falling back to day {chosen.day_of_year}")
    return chosen


def puzzle_from_sheet(text: str, day_of_year: int, rng: Optional[random.Random] = None) -> Puzzle:
    """Parse the sheet and resolve the puzzle for day_of_year."""
    row = select_daily_row(parse_sheet(text), day_of_year, rng)
    return Puzzle.build(row.categories, row.day_of_year)
