"""Realtime negotiation and credential models."""

from datetime import datetime

from pydantic import BaseModel, Field, SecretStr

from .session import CamelModel


class NegotiationRequest(CamelModel):
    """SDP offer forwarded to the realtime provider.

    Fields default to empty so that the relay, not the request parser,
    reports which ones are missing.
    """

    session_id: str = ""
    offer_sdp: str = ""
    model: str = ""
    client_secret: str = ""


class NegotiationResponse(BaseModel):
    success: bool = True
    sdp: str


class CredentialRequest(CamelModel):
    model: str | None = None
    voice: str | None = None
    instructions: str | None = Field(default=None, max_length=8000)


class EphemeralCredential(BaseModel):
    """Short-lived provider secret scoped to one model and one negotiation."""

    value: SecretStr
    model: str
    expires_at: datetime | None = None


class CredentialResponse(CamelModel):
    client_secret: str
    model: str
    expires_at: datetime | None


class PrefetchResponse(CamelModel):
    success: bool = True
    provider_warmed: bool
    store_warmed: bool
    time_ms: int
