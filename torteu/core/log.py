from __future__ import annotations
import logging

from rich.logging import RichHandler


def setup_logging(debug: bool = False) -> None:
    """Route every package logger through rich; call once from the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=debug)],
        force=True,
    )
