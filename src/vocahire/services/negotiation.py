"""WebRTC SDP offer/answer relay to the realtime provider."""

import logging

import httpx

from ..errors import UpstreamError, ValidationFailed
from .credentials import mask_secret
from .realtime_provider import RealtimeProviderClient

logger = logging.getLogger(__name__)


class NegotiationRelay:
    """Forwards one SDP offer and returns the provider's answer verbatim.

    Offers are not safely retryable, so a failed exchange is reported to the
    caller, who must generate a new offer.
    """

    def __init__(self, provider: RealtimeProviderClient):
        self.provider = provider

    async def negotiate(
        self,
        session_id: str,
        offer_sdp: str,
        model: str,
        client_secret: str,
    ) -> str:
        missing = [
            name
            for name, value in (
                ("sessionId", session_id),
                ("offerSdp", offer_sdp),
                ("model", model),
                ("clientSecret", client_secret),
            )
            if not value
        ]
        if missing:
            raise ValidationFailed(
                "Session ID, offer SDP, model, and client secret are required",
                extra={"missing": missing},
            )

        logger.info(
            f"Relaying SDP offer for session {session_id} "
            f"(model={model}, offer={len(offer_sdp)} chars, secret={mask_secret(client_secret)})"
        )

        try:
            answer = await self.provider.exchange_sdp(offer_sdp, model, client_secret)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"SDP exchange for session {session_id} failed: {status} {e.response.text}")
            raise UpstreamError(
                f"Failed to get WebRTC details: {status}",
                provider_status=status,
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"SDP exchange for session {session_id} could not reach provider: {e}")
            raise UpstreamError(
                "Realtime provider unreachable",
                details=str(e),
            ) from e

        logger.info(f"Received answer SDP for session {session_id} ({len(answer)} chars)")
        return answer
