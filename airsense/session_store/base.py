"""Shared protocol for session storage backends."""

from typing import Optional, Protocol

from airsense.app_types import SessionState
from airsense.domain import UserProfile


class SessionStore(Protocol):
    """Protocol for session storage backends."""
    def create_session(
        self,
        profile: Optional[UserProfile] = None,
        symptom_factor: float = 1.0,
    ) -> str:
        """Persist a new session and return its id."""

    def get_session(self, session_id: str) -> Optional[SessionState]:
        """Fetch a session by id, returning None if missing or expired."""

    def update_session(
        self,
        session_id: str,
        profile: Optional[UserProfile] = None,
        symptom_factor: Optional[float] = None,
    ) -> None:
        """Update fields on an existing session, ignoring missing/expired ids."""

    def delete_session(self, session_id: str) -> None:
        """Delete a session without raising if it is absent."""

    def clear(self) -> None:
        """Clear all stored sessions."""
