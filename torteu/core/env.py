# torteu/core/env.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

from ..clock import resolve_tz
from ..errors import ConfigError

DEFAULT_PUZZLE_URL = (
    "https://docs.google.com/spreadsheets/d/e/2PACX-1vQbFVnlcBrpSGHk8PSuGophCOSUl5N-U9HBI6G352dZPgGlZGK1AdA0xduUeqPSfSW-8Om7C8GV8rcb"
    "/pub?gid=1108981138&single=true&output=csv"
)
DEFAULT_TIMEZONE = "Asia/Almaty"

KNOWN_KEYS = [
    "TORTEU_PUZZLE_URL",
    "TORTEU_TIMEZONE",
    "TORTEU_STATE_DIR",
    "TORTEU_MAX_MISTAKES",
    "TORTEU_FETCH_TIMEOUT",
    "TORTEU_REVEAL_DELAY",
]


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""
    puzzle_url: str = DEFAULT_PUZZLE_URL
    timezone: str = DEFAULT_TIMEZONE
    state_dir: Path = Path("~/.torteu").expanduser()
    max_mistakes: int = 4
    fetch_timeout: float = 10.0
    reveal_delay: float = 1.0


def load_env(dotenv_path: str | None = None) -> None:
    """Load .env once. Existing environment variables win."""
    load_dotenv(dotenv_path or os.getenv("DOTENV_PATH", ".env"), override=False)


def describe_env() -> dict[str, str]:
    """
    Returns a dict of which known keys are present (masked).
    """
    found = {}
    for k in KNOWN_KEYS:
        v = os.getenv(k)
        if v:
            mask = v[:4] + "…" if len(v) > 4 else "…"
            found[k] = mask
    return found


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {value}")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    """
    Build Settings from the environment (after loading .env).

    Raises:
        ConfigError: If a numeric value or the timezone is invalid
    """
    load_env(dotenv_path)

    timezone = os.getenv("TORTEU_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    try:
        resolve_tz(timezone)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    state_dir = os.getenv("TORTEU_STATE_DIR")
    return Settings(
        puzzle_url=os.getenv("TORTEU_PUZZLE_URL", "").strip() or DEFAULT_PUZZLE_URL,
        timezone=timezone,
        state_dir=Path(state_dir).expanduser() if state_dir else Path("~/.torteu").expanduser(),
        max_mistakes=_int_env("TORTEU_MAX_MISTAKES", 4, minimum=1),
        fetch_timeout=_float_env("TORTEU_FETCH_TIMEOUT", 10.0),
        reveal_delay=_float_env("TORTEU_REVEAL_DELAY", 1.0),
    )
