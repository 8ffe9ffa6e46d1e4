"""Ephemeral credential issuing for realtime negotiations."""

import logging
from datetime import datetime, timezone

import httpx
from pydantic import SecretStr

from ..errors import CredentialIssueError
from ..models.realtime import EphemeralCredential
from .realtime_provider import RealtimeProviderClient

logger = logging.getLogger(__name__)


def mask_secret(secret: str | None, visible: int = 6) -> str:
    """Render a secret as its first few characters followed by an ellipsis."""
    if not secret:
        return "<empty>"
    return f"{secret[:visible]}..."


class CredentialIssuer:
    """Requests a fresh single-use client secret for every negotiation.

    Nothing is cached: the provider treats each secret as single-use.
    """

    def __init__(
        self,
        provider: RealtimeProviderClient,
        default_model: str,
        default_voice: str | None = None,
        default_instructions: str | None = None,
    ):
        self.provider = provider
        self.default_model = default_model
        self.default_voice = default_voice
        self.default_instructions = default_instructions

    async def issue(
        self,
        model: str | None = None,
        voice: str | None = None,
        instructions: str | None = None,
    ) -> EphemeralCredential:
        model = model or self.default_model
        if not self.provider.api_key:
            raise CredentialIssueError("Realtime provider API key not configured")

        try:
            body = await self.provider.create_session(
                model=model,
                voice=voice or self.default_voice,
                instructions=instructions or self.default_instructions,
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Credential request rejected for model {model}: "
                f"{e.response.status_code} {e.response.text}"
            )
            raise CredentialIssueError(
                f"Failed to obtain realtime credential: {e.response.status_code}",
                extra={"status": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Credential request failed for model {model}: {e}")
            raise CredentialIssueError("Realtime provider unreachable") from e

        secret = (body.get("client_secret") or {}) if isinstance(body, dict) else {}
        value = secret.get("value")
        if not value:
            logger.error(f"Credential response for model {model} carried no client secret")
            raise CredentialIssueError("Realtime provider returned no client secret")

        expires_at = None
        if secret.get("expires_at"):
            expires_at = datetime.fromtimestamp(secret["expires_at"], tz=timezone.utc)

        logger.info(f"Issued realtime credential {mask_secret(value)} for model {model}")
        return EphemeralCredential(value=SecretStr(value), model=model, expires_at=expires_at)
