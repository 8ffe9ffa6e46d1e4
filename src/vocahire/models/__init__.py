"""Data models for the VocaHire realtime relay."""

from .realtime import (
    CredentialRequest,
    CredentialResponse,
    EphemeralCredential,
    NegotiationRequest,
    NegotiationResponse,
    PrefetchResponse,
)
from .session import (
    ControlMessage,
    ControlType,
    InputAccepted,
    RealtimeInput,
    SessionCreate,
    SessionCreateResponse,
    SessionEndResponse,
    SessionRecord,
    SessionStatus,
    SessionStatusResponse,
)
from .user import DevLoginRequest, TokenResponse

__all__ = [
    "ControlMessage",
    "ControlType",
    "CredentialRequest",
    "CredentialResponse",
    "DevLoginRequest",
    "EphemeralCredential",
    "InputAccepted",
    "NegotiationRequest",
    "NegotiationResponse",
    "PrefetchResponse",
    "RealtimeInput",
    "SessionCreate",
    "SessionCreateResponse",
    "SessionEndResponse",
    "SessionRecord",
    "SessionStatus",
    "SessionStatusResponse",
    "TokenResponse",
]
