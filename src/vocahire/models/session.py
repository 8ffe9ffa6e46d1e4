"""Session data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SessionStatus(str, Enum):
    """Lifecycle states of an interview session."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.FAILED)

    def can_transition_to(self, target: "SessionStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.INITIALIZING: {
        SessionStatus.ACTIVE,
        SessionStatus.COMPLETED,
        SessionStatus.FAILED,
    },
    SessionStatus.ACTIVE: {SessionStatus.COMPLETED, SessionStatus.FAILED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.FAILED: set(),
}


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the browser client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionRecord(CamelModel):
    """A persisted session row."""

    session_id: str
    owner: str
    status: SessionStatus = SessionStatus.INITIALIZING
    model: str | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    last_activity: datetime | None = None
    message_count: int = 0

    @property
    def duration(self) -> int:
        """Whole seconds between start and end, 0 until both are known."""
        if self.started_at is None or self.ended_at is None:
            return 0
        return max(0, int((self.ended_at - self.started_at).total_seconds()))


class SessionCreate(CamelModel):
    """Request model for creating a new interview session."""

    model: str | None = Field(default=None, description="Realtime model override")


class SessionCreateResponse(CamelModel):
    session_id: str
    status: SessionStatus
    model: str
    started_at: datetime | None
    expires_at: datetime
    ice_servers: list[dict] = Field(default_factory=list)


class SessionStatusResponse(CamelModel):
    session_id: str
    status: SessionStatus
    started_at: datetime | None
    duration: int
    message_count: int
    last_activity: datetime | None


class SessionEndResponse(CamelModel):
    session_id: str
    status: SessionStatus
    duration: int
    transcript_url: str


class ControlType(str, Enum):
    START = "start"
    STOP = "stop"
    INTERRUPT = "interrupt"


class ControlMessage(BaseModel):
    type: ControlType


class RealtimeInput(CamelModel):
    """One client message for an open session.

    Exactly one of ``audio_chunk``, ``text_input`` or ``control_message`` must
    be present.
    """

    audio_chunk: str | None = Field(default=None, description="Base64 encoded audio")
    text_input: str | None = None
    control_message: ControlMessage | None = None
    timestamp: float | None = None
    sequence_number: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> "RealtimeInput":
        kinds = [
            name
            for name in ("audio_chunk", "text_input", "control_message")
            if getattr(self, name) is not None
        ]
        if len(kinds) != 1:
            raise ValueError(
                "Exactly one of audioChunk, textInput or controlMessage is required"
            )
        return self


class InputAccepted(BaseModel):
    success: bool = True
