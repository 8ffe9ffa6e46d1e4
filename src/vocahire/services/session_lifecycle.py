"""Session lifecycle: create, read, relay input and end."""

import base64
import binascii
import logging
import uuid
from datetime import datetime, timedelta, timezone

from ..errors import (
    Forbidden,
    InternalError,
    InvalidTransition,
    NotFound,
    UpstreamError,
    ValidationFailed,
)
from ..models.session import (
    ControlType,
    RealtimeInput,
    SessionCreateResponse,
    SessionEndResponse,
    SessionRecord,
    SessionStatus,
    SessionStatusResponse,
)
from .channel_registry import ChannelRegistry
from .session_store import SessionStore

logger = logging.getLogger(__name__)

TRANSCRIPT_URL_TEMPLATE = "/api/v1/sessions/{session_id}/transcript"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionLifecycle:
    """Ownership-checked operations over the session store and channel registry."""

    def __init__(
        self,
        store: SessionStore,
        registry: ChannelRegistry,
        default_model: str,
        session_expiry: timedelta = timedelta(hours=1),
        ice_servers: list[dict] | None = None,
        clock=utcnow,
    ):
        self.store = store
        self.registry = registry
        self.default_model = default_model
        self.session_expiry = session_expiry
        self.ice_servers = ice_servers or []
        self.clock = clock

    def _owned(self, session_id: str, requester: str) -> SessionRecord:
        session = self.store.get(session_id)
        if session is None:
            raise NotFound("Session ID doesn't exist")
        if session.owner != requester:
            logger.warning(f"User {requester} denied access to session {session_id}")
            raise Forbidden("Access denied")
        return session

    def _transition(self, session: SessionRecord, target: SessionStatus, **changes) -> SessionRecord:
        if not session.status.can_transition_to(target):
            raise InvalidTransition(
                f"Cannot move session from {session.status.value} to {target.value}"
            )
        try:
            updated = self.store.update(session.session_id, status=target, **changes)
        except Exception as e:
            logger.error(f"Failed to persist session {session.session_id}: {e}", exc_info=True)
            raise InternalError("Failed to update session status") from e
        if updated is None:
            raise InternalError("Failed to update session status")
        return updated

    async def create(self, owner: str, model: str | None = None) -> SessionCreateResponse:
        model = model or self.default_model
        now = self.clock()
        session = SessionRecord(
            session_id=str(uuid.uuid4()),
            owner=owner,
            model=model,
            status=SessionStatus.INITIALIZING,
            started_at=now,
            last_activity=now,
        )
        try:
            self.store.create(session)
        except Exception as e:
            logger.error(f"Failed to persist new session for {owner}: {e}", exc_info=True)
            raise InternalError("Failed to create session") from e

        try:
            await self.registry.open(session.session_id, owner, model)
        except Exception as e:
            logger.error(f"Failed to open realtime channel for session {session.session_id}: {e}")
            self._transition(session, SessionStatus.FAILED, ended_at=self.clock())
            raise UpstreamError("Failed to open realtime channel", details=str(e)) from e

        session = self._transition(session, SessionStatus.ACTIVE)
        logger.info(f"Session {session.session_id} active for user {owner}")
        return SessionCreateResponse(
            session_id=session.session_id,
            status=session.status,
            model=model,
            started_at=session.started_at,
            expires_at=now + self.session_expiry,
            ice_servers=self.ice_servers,
        )

    def get(self, session_id: str, requester: str) -> SessionStatusResponse:
        session = self._owned(session_id, requester)
        return SessionStatusResponse(
            session_id=session.session_id,
            status=session.status,
            started_at=session.started_at,
            duration=session.duration,
            message_count=session.message_count,
            last_activity=session.last_activity or session.started_at,
        )

    async def end(self, session_id: str, requester: str) -> SessionEndResponse:
        session = self._owned(session_id, requester)

        if session.status.is_terminal:
            # Already ended: report stored state without recomputing duration.
            logger.info(f"Session {session_id} already {session.status.value}")
        else:
            now = self.clock()
            session = self._transition(
                session,
                SessionStatus.COMPLETED,
                ended_at=now,
                last_activity=now,
            )
            if session.started_at is None:
                logger.warning(f"Session {session_id} ended without a start time")
            logger.info(f"Session {session_id} completed after {session.duration}s")

        await self.registry.close(session_id)

        return SessionEndResponse(
            session_id=session.session_id,
            status=session.status,
            duration=session.duration,
            transcript_url=TRANSCRIPT_URL_TEMPLATE.format(session_id=session.session_id),
        )

    async def send_input(self, session_id: str, requester: str, payload: RealtimeInput) -> None:
        entry = self.registry.get(session_id, touch=False)
        if entry is None:
            raise NotFound("Session not found")
        if entry.owner != requester:
            logger.warning(f"User {requester} denied input to session {session_id}")
            raise Forbidden("Access denied")
        entry.touch()

        control = payload.control_message.type if payload.control_message else None
        if control == ControlType.STOP:
            await self.end(session_id, requester)
            return

        session = self.store.get(session_id)
        if session is None:
            # Channel outlived its row; drop it so both tiers agree.
            logger.warning(f"Open channel for session {session_id} has no stored row, closing")
            await self.registry.close(session_id)
            raise NotFound("Session not found")

        audio = None
        if payload.audio_chunk is not None:
            try:
                audio = base64.b64decode(payload.audio_chunk, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationFailed("audioChunk is not valid base64") from e

        # The number is only recorded once the message reached the channel.
        self.registry.check_sequence(entry, payload.sequence_number)
        if control is not None:
            await self._forward(session_id, entry.channel.send_control(control.value))
        elif audio is not None:
            await self._forward(session_id, entry.channel.send_audio(audio))
        else:
            await self._forward(session_id, entry.channel.send_text(payload.text_input))
        if payload.sequence_number is not None:
            entry.last_sequence = payload.sequence_number

        try:
            self.store.update(
                session_id,
                last_activity=self.clock(),
                message_count=session.message_count + 1,
            )
        except Exception as e:
            logger.error(f"Failed to record activity for session {session_id}: {e}", exc_info=True)
            raise InternalError("Failed to update session activity") from e

    async def _forward(self, session_id: str, send) -> None:
        try:
            await send
        except ConnectionError as e:
            logger.error(f"Relay to provider failed for session {session_id}: {e}")
            raise InternalError(
                "Failed to process input",
                code="RELAY_FAILED",
                extra={"details": str(e)},
            ) from e

    async def expire(self, session_id: str) -> None:
        """Mark a session whose channel went idle as failed."""
        session = self.store.get(session_id)
        if session is None or session.status.is_terminal:
            return
        self._transition(session, SessionStatus.FAILED, ended_at=self.clock())
        logger.info(f"Session {session_id} failed after inactivity timeout")
