from __future__ import annotations
import asyncio
import random
from typing import Optional

import orjson

from ..errors import ParseError
from ..puzzle import Puzzle
from .base_source import http_get


class ApiSource:
    """
    Puzzle transport for the JSON puzzle endpoint (``GET /api/puzzle``).

    The server already resolved the day, so day_of_year is ignored.
    """

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def load(self, day_of_year: int, rng: Optional[random.Random] = None) -> Puzzle:
        loop = asyncio.get_running_loop()
        body = await loop.run_in_executor(None, http_get, self.url, self.timeout)
        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON from puzzle endpoint: {e}") from e
        return Puzzle.from_dict(data)
