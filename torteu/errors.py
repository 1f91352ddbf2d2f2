"""
Error taxonomy for the daily puzzle game.
"""

from __future__ import annotations
from typing import Optional


class TorteuError(Exception):
    """Base class for every error raised by this package."""


class FetchError(TorteuError):
    """Puzzle data could not be retrieved (network failure or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(TorteuError, ValueError):
    """Puzzle payload is malformed."""


class NoPuzzleAvailable(ParseError):
    """No valid puzzle row survived parsing."""


class StorageError(TorteuError):
    """Persisted session could not be read or written."""


class PreconditionError(TorteuError, ValueError):
    """Engine operation called in a state that does not allow it."""


class ConfigError(TorteuError, ValueError):
    """Configuration value is missing or invalid."""
