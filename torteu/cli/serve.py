from __future__ import annotations

import typer
import uvicorn

from ..core.log import setup_logging
from ..server import create_app

app = typer.Typer()


@app.command()
def main(host: str = "127.0.0.1", port: int = 8080, debug: bool = False):
    """
    Serve GET /api/puzzle.
    """
    setup_logging(debug)
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ == "__main__":
    app()
