"""In-memory session repository.

Sessions are stored by reference, so callers mutating a loaded session see
their changes without saving. The engine still calls save() after every
mutation so the file backend behaves the same way.
"""

from typing import Optional

from mailquest.models.session import GameSession

from .repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Dict-backed repository owned by a single engine instance."""

    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}

    def get(self, room_code: str) -> Optional[GameSession]:
        return self._sessions.get(room_code)

    def save(self, session: GameSession) -> None:
        self._sessions[session.room_code] = session

    def delete(self, room_code: str) -> bool:
        return self._sessions.pop(room_code, None) is not None

    def list_room_codes(self) -> list[str]:
        return sorted(self._sessions)
