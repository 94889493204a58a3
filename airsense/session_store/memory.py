"""In-memory session store with TTL."""

import threading
import time
import uuid
from typing import Any, Optional

from airsense.app_types import SessionState
from airsense.domain import UserProfile
from airsense.session_store.base import SessionStore

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="session_store/in_memory_session_store")


class InMemorySessionStore(SessionStore):
    """Thread-safe, TTL-aware in-memory store."""

    def __init__(self, ttl_seconds: int = 3600, max_age_seconds: int | None = None) -> None:
        """Initialize the store with a sliding TTL (seconds) and optional absolute max age."""
        logger.debug("Initializing InMemorySessionStore")
        self.ttl = ttl_seconds
        self.max_age = max_age_seconds
        self._sessions: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _expired(self, exp: float, created_at: float) -> bool:
        now = time.monotonic()
        if exp < now:
            return True
        if self.max_age is None:
            return False
        return now - created_at > self.max_age

    def _next_expiry(self, created_at: float) -> float:
        next_exp = time.monotonic() + self.ttl
        if self.max_age is None:
            return next_exp
        return min(next_exp, created_at + self.max_age)

    def _sweep_expired(self) -> None:
        """Drop every expired session; caller holds the lock."""
        stale = [sid for sid, data in self._sessions.items() if self._expired(data["exp"], data["created_at"])]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.debug(f"Swept {len(stale)} expired sessions")

    def create_session(self, profile: Optional[UserProfile] = None, symptom_factor: float = 1.0) -> str:
        """Create a new session and return its id, sweeping expired ones first."""
        with self._lock:
            self._sweep_expired()
            sid = str(uuid.uuid4())
            created_at = time.monotonic()
            self._sessions[sid] = {
                "profile": profile or UserProfile(),
                "symptom_factor": symptom_factor,
                "created_at": created_at,
                "exp": self._next_expiry(created_at),
            }
            return sid

    def get_session(self, session_id: str) -> Optional[SessionState]:
        """Return the session state, refreshing TTL, or None if missing/expired."""
        with self._lock:
            data = self._sessions.get(session_id)
            if not data:
                return None
            if self._expired(data["exp"], data["created_at"]):
                self._sessions.pop(session_id, None)
                return None
            data["exp"] = self._next_expiry(data["created_at"])
            return SessionState(profile=data["profile"], symptom_factor=data["symptom_factor"])

    def update_session(
        self,
        session_id: str,
        profile: Optional[UserProfile] = None,
        symptom_factor: Optional[float] = None,
    ) -> None:
        """Update a session in place; no-op if missing/expired."""
        with self._lock:
            data = self._sessions.get(session_id)
            if not data or self._expired(data["exp"], data["created_at"]):
                self._sessions.pop(session_id, None)
                return
            if profile is not None:
                data["profile"] = profile
            if symptom_factor is not None:
                data["symptom_factor"] = symptom_factor
            data["exp"] = self._next_expiry(data["created_at"])

    def delete_session(self, session_id: str) -> None:
        """Remove a session if it exists."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        """Clear all sessions."""
        with self._lock:
            self._sessions.clear()
