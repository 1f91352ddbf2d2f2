"""
Command line entry points.

    torteu play     # interactive terminal game
    torteu puzzle   # print today's puzzle as JSON
    torteu serve    # run the puzzle endpoint
"""

import typer

from .play import main as run_play
from .show_puzzle import main as show_puzzle
from .serve import main as run_server

app = typer.Typer(help="Daily four-by-four categorization puzzle.")
app.command("play")(run_play)
app.command("puzzle")(show_puzzle)
app.command("serve")(run_server)

__all__ = [
    "app",
    "run_play",
    "show_puzzle",
    "run_server",
]
