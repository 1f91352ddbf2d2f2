from __future__ import annotations
import logging
import random
from typing import Optional, Protocol

import requests

from ..errors import FetchError
from ..puzzle import Puzzle

logger = logging.getLogger(__name__)


class PuzzleSource(Protocol):
    """Protocol defining the interface all puzzle transports must implement."""

    async def load(self, day_of_year: int, rng: Optional[random.Random] = None) -> Puzzle:
        """
        Retrieve and resolve the puzzle for a day.

        Args:
            day_of_year: 1-based ordinal day in the game's civil timezone
            rng: Random source for fallback row selection

        Returns:
            A validated Puzzle

        Raises:
            FetchError: If the transport fails or answers with a non-2xx status
            ParseError: If the payload is malformed
        """
        ...


def http_get(url: str, timeout: float) -> bytes:
    """
    Blocking GET returning the raw body.

    Raises:
        FetchError: On network failure or non-2xx status
    """
    logger.info(f"Fetching puzzle data from {url}")
    try:
        response = requests.get(url, timeout=timeout, headers={"Cache-Control": "no-store"})
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch puzzle data: {e}") from e
    if not response.ok:
        raise FetchError(f"Failed to fetch puzzle data: {response.status_code}", status_code=response.status_code)
    return response.content
