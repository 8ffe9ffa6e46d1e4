"""Interview session lifecycle API endpoints."""

from fastapi import APIRouter, Depends

from ...models.session import (
    InputAccepted,
    RealtimeInput,
    SessionCreate,
    SessionCreateResponse,
    SessionEndResponse,
    SessionStatusResponse,
)
from ...services import SessionLifecycle
from ..dependencies import get_lifecycle
from .auth import get_current_user

router = APIRouter()


@router.post("", response_model=SessionCreateResponse, status_code=201)
async def create_session(
    request: SessionCreate | None = None,
    user_id: str = Depends(get_current_user),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
):
    """
    Create a new interview session for the current user.

    The session row starts as ``initializing``; once the realtime provider
    channel is open it becomes ``active``. If the channel cannot be opened the
    session is marked ``failed`` and the provider error is returned.
    """
    return await lifecycle.create(owner=user_id, model=request.model if request else None)


@router.get("/{session_id}", response_model=SessionStatusResponse)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
):
    """Get status, timing and message count for a session."""
    return lifecycle.get(session_id, user_id)


@router.put("/{session_id}", response_model=InputAccepted)
async def send_input(
    session_id: str,
    payload: RealtimeInput,
    user_id: str = Depends(get_current_user),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
):
    """
    Relay one client message to the session's open provider channel.

    The body carries exactly one of ``audioChunk`` (base64), ``textInput`` or
    ``controlMessage``. A ``stop`` control message ends the session.
    """
    await lifecycle.send_input(session_id, user_id, payload)
    return InputAccepted()


@router.post("/{session_id}/end", response_model=SessionEndResponse)
async def end_session(
    session_id: str,
    user_id: str = Depends(get_current_user),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
):
    """End a session and return where its transcript will be available."""
    return await lifecycle.end(session_id, user_id)
