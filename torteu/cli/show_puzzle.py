from __future__ import annotations
import asyncio

import orjson
import typer
from rich import print

from ..core.env import describe_env, load_settings
from ..core.log import setup_logging
from ..errors import FetchError, ParseError
from ..server import build_puzzle_source

app = typer.Typer()


@app.command()
def main(debug: bool = False):
    """
    Fetch today's puzzle and print it as JSON.
    """
    setup_logging(debug)
    settings = load_settings()
    if debug:
        print({"env_keys_detected": describe_env()})

    puzzles = build_puzzle_source(settings)
    try:
        puzzle = asyncio.run(puzzles.fetch_daily_puzzle())
    except (FetchError, ParseError) as e:
        print(f"[red]Failed to load puzzle data:[/] {e}")
        raise typer.Exit(1)

    typer.echo(orjson.dumps(puzzle.to_dict(), option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    app()
