"""Realtime provider endpoints: credentials, SDP negotiation and prefetch."""

from fastapi import APIRouter, Depends

from ...config import Settings
from ...models.realtime import (
    CredentialRequest,
    CredentialResponse,
    NegotiationRequest,
    NegotiationResponse,
    PrefetchResponse,
)
from ...services import CredentialIssuer, NegotiationRelay, RealtimeProviderClient, SessionStore
from ...services.prefetch import prefetch
from ..dependencies import get_app_settings, get_issuer, get_provider, get_relay, get_store
from .auth import get_current_user

router = APIRouter()


@router.post("/credentials", response_model=CredentialResponse)
async def issue_credential(
    request: CredentialRequest | None = None,
    user_id: str = Depends(get_current_user),
    issuer: CredentialIssuer = Depends(get_issuer),
):
    """Request a fresh single-use client secret for the browser's SDP exchange."""
    request = request or CredentialRequest()
    credential = await issuer.issue(
        model=request.model,
        voice=request.voice,
        instructions=request.instructions,
    )
    return CredentialResponse(
        client_secret=credential.value.get_secret_value(),
        model=credential.model,
        expires_at=credential.expires_at,
    )


@router.post("/negotiate", response_model=NegotiationResponse)
async def negotiate(
    request: NegotiationRequest,
    user_id: str = Depends(get_current_user),
    relay: NegotiationRelay = Depends(get_relay),
):
    """
    Forward a WebRTC offer to the realtime provider and return its answer.

    The provider is authenticated with the ephemeral ``clientSecret``. Provider
    failures keep their original status code and body.
    """
    answer = await relay.negotiate(
        session_id=request.session_id,
        offer_sdp=request.offer_sdp,
        model=request.model,
        client_secret=request.client_secret,
    )
    return NegotiationResponse(sdp=answer)


@router.get("/prefetch", response_model=PrefetchResponse)
async def prefetch_connections(
    user_id: str = Depends(get_current_user),
    provider: RealtimeProviderClient = Depends(get_provider),
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Warm the provider connection and session store before an interview starts."""
    return await prefetch(provider, store, timeout=settings.prefetch_timeout_seconds)
