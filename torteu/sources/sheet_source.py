from __future__ import annotations
import asyncio
import random
from typing import Optional

from ..errors import ParseError
from ..puzzle import Puzzle
from ..sheet import puzzle_from_sheet
from .base_source import http_get


class SheetSource:
    """Puzzle transport for the published spreadsheet CSV export."""

    def __init__(self, url: str, timeout: float = 10.0):
        """
        Args:
            url: CSV export URL
            timeout: HTTP timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    async def load(self, day_of_year: int, rng: Optional[random.Random] = None) -> Puzzle:
        loop = asyncio.get_running_loop()
        body = await loop.run_in_executor(None, http_get, self.url, self.timeout)
        try:
            text = body.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Puzzle sheet is not valid UTF-8: {e}") from e
        return puzzle_from_sheet(text, day_of_year, rng)
