"""Shared dataclasses and lightweight types used across modules."""

from dataclasses import dataclass

from airsense.domain import UserProfile


@dataclass(frozen=True)
class SessionState:
    """What a client session carries between requests."""
    profile: UserProfile
    symptom_factor: float = 1.0
