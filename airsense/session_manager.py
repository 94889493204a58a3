"""Session manager facade over the session store."""
from typing import Optional

from airsense.app_types import SessionState
from airsense.config import settings
from airsense.domain import UserProfile
from airsense.session_store import InMemorySessionStore, SessionStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="session_manager")


def _init_store() -> SessionStore:
    """Initialize the backing session store based on configuration."""
    logger.debug(f"Initializing in-memory session store (ttl={settings.session_ttl_seconds}s)")
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


_store: SessionStore = _init_store()


def use_in_memory_store_for_tests(ttl_seconds: int = 3600) -> None:
    """Override store for tests to ensure isolation and determinism."""
    global _store
    _store = InMemorySessionStore(ttl_seconds=ttl_seconds)


def create_session(profile: Optional[UserProfile] = None, symptom_factor: float = 1.0) -> str:
    """Create and persist a new session, returning its ID."""
    return _store.create_session(profile, symptom_factor)


def get_session(session_id: str) -> Optional[SessionState]:
    """Fetch a session by ID, refreshing TTL if applicable."""
    return _store.get_session(session_id)


def update_session(
    session_id: str,
    profile: Optional[UserProfile] = None,
    symptom_factor: Optional[float] = None,
):
    """Update the stored profile and/or symptom factor."""
    return _store.update_session(session_id, profile, symptom_factor)


def delete_session(session_id: str):
    """Delete a session by ID."""
    return _store.delete_session(session_id)


def clear_sessions():
    """Clear all sessions from the backing store (dev/testing)."""
    return _store.clear()
