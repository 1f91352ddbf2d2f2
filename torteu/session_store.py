"""
Durable session storage.

Storage failures never interrupt play: reads degrade to "no saved
session", writes are skipped, both are logged.
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Optional

import orjson

from .errors import StorageError
from .session import Session, session_from_record, session_to_record

logger = logging.getLogger(__name__)

STORAGE_KEY = "torteu-tugel-game-result"


class SessionStore:
    """
    Load/save/clear on top of a raw byte slot.

    Subclasses implement _read, _write and _delete and raise StorageError
    on backend failure.
    """

    def _read(self) -> Optional[bytes]:
        raise NotImplementedError

    def _write(self, payload: bytes) -> None:
        raise NotImplementedError

    def _delete(self) -> None:
        raise NotImplementedError

    def load(self, puzzle_id: str, today: dt.date) -> Optional[Session]:
        """
        Return the saved session if it belongs to this puzzle and this civil date.

        Corrupt or stale records are purged and None is returned.
        """
        try:
            raw = self._read()
        except StorageError as e:
            logger.warning(f"Could not read saved session: {e}")
            return None
        if raw is None:
            return None

        try:
            session = session_from_record(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValueError) as e:
            logger.warning(f"Discarding corrupt saved session: {e}")
            self.clear()
            return None

        if session.puzzle_id != puzzle_id or session.date != today:
            logger.info(
                f"Discarding stale session (date {session.date.isoformat()}, "
                f"puzzle {'matches' if session.puzzle_id == puzzle_id else 'differs'})"
            )
            self.clear()
            return None

        logger.info(f"Resuming {session.status.value} session from {session.date.isoformat()}")
        return session

    def save(self, session: Session) -> None:
        """Best effort: failures are logged and swallowed."""
        try:
            self._write(orjson.dumps(session_to_record(session)))
        except StorageError as e:
            logger.error(f"Failed to store game result: {e}")

    def clear(self) -> None:
        try:
            self._delete()
        except StorageError as e:
            logger.warning(f"Failed to clear saved session: {e}")


class FileSessionStore(SessionStore):
    """One JSON file per storage key inside a state directory."""

    def __init__(self, state_dir: Path | str, key: str = STORAGE_KEY):
        self.path = Path(state_dir) / f"{key}.json"

    def _read(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(str(e)) from e

    def _write(self, payload: bytes) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_bytes(payload)
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(str(e)) from e

    def _delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(str(e)) from e


class MemorySessionStore(SessionStore):
    """Process-local slot; keeps the serialized bytes so records round-trip like on disk."""

    def __init__(self, payload: Optional[bytes] = None):
        self.payload = payload

    def _read(self) -> Optional[bytes]:
        return self.payload

    def _write(self, payload: bytes) -> None:
        self.payload = payload

    def _delete(self) -> None:
        self.payload = None
