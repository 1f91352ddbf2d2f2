from __future__ import annotations

from .api_source import ApiSource
from .base_source import PuzzleSource
from .sheet_source import SheetSource
from .static_source import StaticSource

BUILTIN_SCHEME = "builtin:"


def get_source_for_url(url: str, timeout: float = 10.0) -> PuzzleSource:
    """
    Factory function to get the appropriate transport for a puzzle URL.

    Args:
        url: ``builtin:`` for the bundled sample, a CSV export URL for the
             spreadsheet, anything else is treated as the JSON endpoint

    Returns:
        Transport instance

    Raises:
        ValueError: If url is empty or not http(s)
    """
    url = (url or "").strip()
    if not url:
        raise ValueError("Puzzle URL is empty")

    if url.startswith(BUILTIN_SCHEME):
        return StaticSource()

    if not url.startswith(("http://", "https://")):
        raise ValueError(
            f"Unsupported puzzle URL: {url}\n"
            f"Supported: builtin:, http(s) CSV export (output=csv or *.csv), or the JSON puzzle endpoint"
        )

    lowered = url.lower()
    if "output=csv" in lowered or lowered.split("?", 1)[0].endswith(".csv"):
        return SheetSource(url, timeout=timeout)

    return ApiSource(url, timeout=timeout)
