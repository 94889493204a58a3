"""HTTP API for the AirSense+ dashboard and chatbot."""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .app_types import SessionState
from .config import settings
from .data_sources import build_data_source
from .domain import ChatResponsePayload, DashboardPayload, UserProfile, Wellbeing
from .pipeline import build_chat_response, build_dashboard, normalize_symptom_factor, symptom_factor_for
from .session_manager import create_session, get_session, update_session
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="airsense/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the configured key, if any."""
    if not settings.api_key:
        logger.debug("No API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)


class _ApiModel(BaseModel):
    """Request/response body using the same camelCase keys as the domain payloads."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileRequest(UserProfile):
    """Incoming profile payload."""
    pass


class StartResponse(_ApiModel):
    """Session bootstrap response."""
    session_id: str
    profile: UserProfile
    symptom_factor: float


class ProfileResponse(_ApiModel):
    """Profile stored on a session."""
    profile: UserProfile


class SymptomsRequest(_ApiModel):
    """Symptom tracker answer, either as a wellbeing level or a raw factor."""
    wellbeing: Optional[Wellbeing] = None
    symptom_factor: Optional[float] = None


class ChatRequest(_ApiModel):
    """Incoming chat message payload."""
    message: str = ""
    city: Optional[str] = None
    symptom_factor: Optional[float] = None


def _require_session(session_id: str) -> SessionState:
    """Return the session or raise a 404."""
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session ID")
    return session


def _effective_factor(requested: Optional[float], session: SessionState) -> float:
    """A per-request factor wins over the one stored on the session."""
    if requested is None:
        return session.symptom_factor
    return normalize_symptom_factor(requested)


@router.post("/session/start", response_model=StartResponse)
def start_session(profile: ProfileRequest | None = None):
    """Create a session for a profile (defaults when omitted)."""
    prefs = UserProfile(**profile.model_dump()) if profile else UserProfile()
    session_id = create_session(prefs, 1.0)
    logger.info(f"Started session for {prefs.city} (sensitivity={prefs.sensitivity.value})")
    return StartResponse(session_id=session_id, profile=prefs, symptom_factor=1.0)


@router.get("/session/{session_id}/profile", response_model=ProfileResponse)
def get_profile(session_id: str):
    """Return the stored profile for a session."""
    session = _require_session(session_id)
    return ProfileResponse(profile=session.profile)


@router.post("/session/{session_id}/profile", response_model=ProfileResponse)
def set_profile(session_id: str, profile: ProfileRequest):
    """Replace the stored profile for a session."""
    _require_session(session_id)
    prefs = UserProfile(**profile.model_dump())
    update_session(session_id, profile=prefs)
    return ProfileResponse(profile=prefs)


@router.post("/session/{session_id}/symptoms", response_model=DashboardPayload)
def report_symptoms(session_id: str, req: SymptomsRequest):
    """Store a symptom factor and return the dashboard recomputed with it."""
    session = _require_session(session_id)
    if req.wellbeing is not None:
        factor = symptom_factor_for(req.wellbeing)
    elif req.symptom_factor is not None:
        factor = normalize_symptom_factor(req.symptom_factor)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="wellbeing or symptomFactor is required")

    update_session(session_id, symptom_factor=factor)
    logger.info(f"Session symptom factor set to {factor}")
    return build_dashboard(session.profile, symptom_factor=factor, data_source=DATA_SOURCE)


@router.get("/session/{session_id}/dashboard", response_model=DashboardPayload)
def get_dashboard(
    session_id: str,
    city: Optional[str] = Query(default=None),
    symptom_factor: Optional[float] = Query(default=None, alias="symptomFactor"),
):
    """Compute the dashboard for the session's profile, optionally for another city."""
    session = _require_session(session_id)
    return build_dashboard(
        session.profile,
        city=city,
        symptom_factor=_effective_factor(symptom_factor, session),
        data_source=DATA_SOURCE,
    )


@router.post("/session/{session_id}/chat", response_model=ChatResponsePayload)
def chat(session_id: str, req: ChatRequest):
    """Answer a chat message using the session's profile."""
    session = _require_session(session_id)

    if not req.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="message is required")
    if len(req.message) > settings.max_user_message_chars:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"Message too long; limit {settings.max_user_message_chars} characters.")

    return build_chat_response(
        req.message,
        session.profile,
        city=req.city,
        symptom_factor=_effective_factor(req.symptom_factor, session),
        data_source=DATA_SOURCE,
        map_replies=True,
    )
