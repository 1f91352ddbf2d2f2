import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .clock import Clock
from .core.env import Settings, load_settings
from .errors import FetchError, ParseError
from .puzzle_cache import DailyPuzzleSource
from .sources import get_source_for_url

logger = logging.getLogger(__name__)

puzzle_router = APIRouter()


def build_puzzle_source(settings: Settings) -> DailyPuzzleSource:
    return DailyPuzzleSource(
        get_source_for_url(settings.puzzle_url, timeout=settings.fetch_timeout),
        Clock(settings.timezone),
    )


@puzzle_router.get("/api/puzzle")
async def get_puzzle(request: Request):
    """Today's puzzle as JSON, or 500 when it cannot be produced."""
    puzzles: DailyPuzzleSource = request.app.state.puzzles
    try:
        puzzle = await puzzles.fetch_daily_puzzle()
    except (FetchError, ParseError) as e:
        logger.error(f"Failed to load puzzle data: {e}")
        return JSONResponse({"error": "Failed to load puzzle data"}, status_code=500)
    return puzzle.to_dict()


def create_app(puzzles: DailyPuzzleSource | None = None) -> FastAPI:
    """
    Build the API app.

    Args:
        puzzles: Puzzle cache to serve from; built from the environment when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if puzzles is None:
            app.state.puzzles = build_puzzle_source(load_settings())
        else:
            app.state.puzzles = puzzles
        try:
            yield
        finally:
            app.state.puzzles.reset()
            logger.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.include_router(puzzle_router)
    return app
