"""Abstract session repository for Mailquest.

The engine reads and writes GameSession objects only through this
interface, so the in-memory and JSON file backends are interchangeable.
"""

from abc import ABC, abstractmethod
from typing import Optional

from mailquest.models.session import GameSession


class SessionRepository(ABC):
    """Abstract base class for game session storage."""

    @abstractmethod
    def get(self, room_code: str) -> Optional[GameSession]:
        """Load a session by room code.

        Args:
            room_code: Room code of the session

        Returns:
            The session, or None if not found
        """
        pass

    @abstractmethod
    def save(self, session: GameSession) -> None:
        """Persist a session, replacing any previous version.

        Args:
            session: Session to store under its room code
        """
        pass

    @abstractmethod
    def delete(self, room_code: str) -> bool:
        """Delete a session.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_room_codes(self) -> list[str]:
        """Return the room codes of all stored sessions, sorted."""
        pass

    def update_activity(self, room_code: str) -> bool:
        """Refresh a session's last_activity timestamp.

        Returns:
            True if the session exists
        """
        session = self.get(room_code)
        if session is None:
            return False
        session.touch()
        self.save(session)
        return True
