from __future__ import annotations

import asyncio
import random
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from ..controller import GameController
from ..core.env import describe_env, load_settings
from ..core.log import setup_logging
from ..engine import GameSnapshot
from ..session import Outcome
from ..utils import normalize_text

app = typer.Typer()
console = Console()

LEVEL_STYLE = {
    1: "black on yellow",
    2: "black on green",
    3: "black on cyan",
    4: "white on magenta",
}

FEEDBACK = {
    Outcome.DUPLICATE: "[yellow]You already tried that group[/]",
    Outcome.ONE_AWAY: "[yellow]One away...[/]",
    Outcome.INCORRECT: "[red]Not a group[/]",
    Outcome.CORRECT: "[green]Correct![/]",
    Outcome.WIN: "[bold green]All four found![/]",
    Outcome.LOSS: "[bold red]Out of mistakes. Try again tomorrow[/]",
}

HELP = "Type item text(s) separated by commas to toggle, or: submit, shuffle, clear, quit"


def render_board(snap: GameSnapshot) -> None:
    for category in snap.cleared_categories:
        console.print(
            f" {category.name} · {', '.join(category.items)} ",
            style=LEVEL_STYLE.get(category.level, ""),
        )

    if snap.items:
        table = Table(show_header=False, box=box.SQUARE, expand=True)
        for _ in range(4):
            table.add_column(justify="center")
        cells = [
            f"[reverse bold]{item.text}[/]" if item.selected else item.text
            for item in snap.items
        ]
        for i in range(0, len(cells), 4):
            table.add_row(*cells[i:i + 4])
        console.print(table)

    console.print(f"Mistakes remaining: {'● ' * snap.mistakes_remaining}")


def render_history(snap: GameSnapshot) -> None:
    for guess in snap.guess_history:
        console.print("".join(f"[{LEVEL_STYLE[i.level]}]  [/]" for i in guess))


def parse_selection(raw: str) -> List[str]:
    return [normalize_text(part) for part in raw.split(",") if part.strip()]


async def read_command(prompt: str = "> ") -> str:
    # Read in the executor so the rollover timer keeps running
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, console.input, prompt)


async def play(controller: GameController) -> int:
    """Drive one interactive session. Returns the process exit code."""
    try:
        await controller.start()
        while True:
            await controller.resume()
            engine = controller.engine
            if engine is None:
                console.print(f"[red]Puzzle unavailable:[/] {controller.last_error}")
                return 1

            snap = engine.snapshot()
            console.rule("[bold]ТӨРТЕУ ТҮГЕЛ[/]")
            render_board(snap)
            if snap.is_won or snap.is_lost:
                render_history(snap)
                console.print(FEEDBACK[Outcome.WIN if snap.is_won else Outcome.LOSS])
                return 0

            raw = (await read_command()).strip()
            cmd = raw.lower()
            if cmd in ("q", "quit", "exit"):
                return 0
            if cmd in ("?", "help"):
                console.print(HELP)
            elif cmd == "shuffle":
                engine.shuffle()
            elif cmd in ("clear", "deselect"):
                engine.deselect_all()
            elif cmd in ("s", "submit"):
                if len(snap.selected) != 4:
                    console.print("[yellow]Select exactly 4 items first[/]")
                    continue
                outcome = engine.submit()
                console.print(FEEDBACK[outcome])
                if outcome is Outcome.WIN:
                    await controller.play_out_win()
                elif outcome is Outcome.LOSS:
                    await controller.play_out_loss()
            elif raw:
                for text in parse_selection(raw):
                    engine.select(text)
    finally:
        controller.close()


@app.command()
def main(seed: Optional[int] = None, debug: bool = False):
    """
    Play today's puzzle in the terminal.
    """
    setup_logging(debug)
    settings = load_settings()
    if debug:
        console.print({"env_keys_detected": describe_env()})

    controller = GameController.from_settings(settings, rng=random.Random(seed))
    console.print(HELP)
    try:
        code = asyncio.run(play(controller))
    except (KeyboardInterrupt, EOFError):
        code = 0
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
