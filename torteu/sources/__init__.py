"""
Puzzle transports.

- SheetSource: the published spreadsheet CSV export
- ApiSource: the JSON puzzle endpoint served by ``torteu serve``
- StaticSource: bundled sample sheet, for offline play and tests

Usage:
    from torteu.sources import get_source_for_url

    source = get_source_for_url(settings.puzzle_url)
    puzzle = await source.load(day_of_year=42)
"""

from .base_source import PuzzleSource, http_get
from .sheet_source import SheetSource
from .api_source import ApiSource
from .static_source import StaticSource, SAMPLE_SHEET
from .source_factory import get_source_for_url, BUILTIN_SCHEME

__all__ = [
    "get_source_for_url",
    "SheetSource",
    "ApiSource",
    "StaticSource",
    "PuzzleSource",
    "http_get",
    "SAMPLE_SHEET",
    "BUILTIN_SCHEME",
]
