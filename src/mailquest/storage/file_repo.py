"""JSON file session repository.

Each session is written to ``<sessions_path>/<room_code>.json`` using the
session's own JSON encoding, so modifier scopes are stored as round lists.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from mailquest.models.session import GameSession

from .repository import SessionRepository

logger = logging.getLogger(__name__)

ROOM_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class FileSessionRepository(SessionRepository):
    """JSON file-based session repository."""

    def __init__(self, sessions_path: str | Path = "sessions"):
        """Initialize repository.

        Args:
            sessions_path: Directory holding one JSON file per session
        """
        self.sessions_path = Path(sessions_path)
        self.sessions_path.mkdir(parents=True, exist_ok=True)

    def _get_session_path(self, room_code: str) -> Path:
        if not ROOM_CODE_PATTERN.match(room_code):
            raise ValueError(f"Invalid room code: {room_code!r}")
        return self.sessions_path / f"{room_code}.json"

    def get(self, room_code: str) -> Optional[GameSession]:
        """Load a session, or None if missing or unreadable."""
        try:
            path = self._get_session_path(room_code)
        except ValueError:
            return None
        if not path.exists():
            return None
        try:
            return GameSession.from_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            logger.warning(f"Could not load session {room_code} from {path}: {e}")
            return None

    def save(self, session: GameSession) -> None:
        path = self._get_session_path(session.room_code)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(session.to_json(), encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, room_code: str) -> bool:
        try:
            path = self._get_session_path(room_code)
        except ValueError:
            return False
        if path.exists():
            path.unlink()
            return True
        return False

    def list_room_codes(self) -> list[str]:
        return sorted(path.stem for path in self.sessions_path.glob("*.json"))
