"""
Төртеу түгел: daily four-by-four categorization puzzle - core modules.
"""

from .clock import Clock
from .puzzle import Category, Puzzle, build_puzzle_id
from .session import Item, Outcome, Session, Status
from .sheet import parse_sheet, select_daily_row
from .puzzle_cache import DailyPuzzleSource
from .session_store import FileSessionStore, MemorySessionStore, SessionStore
from .engine import GameEngine, GameSnapshot
from .scheduler import RolloverScheduler
from .controller import GameController
from .errors import (
    TorteuError,
    FetchError,
    ParseError,
    NoPuzzleAvailable,
    StorageError,
    PreconditionError,
    ConfigError,
)

__all__ = [
    "Clock",
    "Category",
    "Puzzle",
    "build_puzzle_id",
    "Item",
    "Outcome",
    "Session",
    "Status",
    "parse_sheet",
    "select_daily_row",
    "DailyPuzzleSource",
    "SessionStore",
    "FileSessionStore",
    "MemorySessionStore",
    "GameEngine",
    "GameSnapshot",
    "RolloverScheduler",
    "GameController",
    "TorteuError",
    "FetchError",
    "ParseError",
    "NoPuzzleAvailable",
    "StorageError",
    "PreconditionError",
    "ConfigError",
]
