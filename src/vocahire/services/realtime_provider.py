"""OpenAI Realtime HTTP client for credentials and SDP exchange."""

import httpx


class RealtimeProviderClient:
    """Thin client over the realtime provider's HTTPS endpoints.

    Methods raise ``httpx.HTTPStatusError`` for non-2xx responses and
    ``httpx.RequestError`` for transport failures; callers decide how to
    surface them.
    """

    BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = 30.0,
    ):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "OpenAI-Beta": "realtime=v1",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    async def create_session(
        self,
        model: str,
        voice: str | None = None,
        instructions: str | None = None,
    ) -> dict:
        """Create a provider session and return its body, including ``client_secret``."""
        async with self._client() as client:
            payload = {"model": model}
            if voice:
                payload["voice"] = voice
            if instructions:
                payload["instructions"] = instructions

            response = await client.post(
                f"{self.base_url}/realtime/sessions",
                json=payload,
                headers=self.headers,
            )
            response.raise_for_status()
            return response.json()

    async def exchange_sdp(self, offer_sdp: str, model: str, client_secret: str) -> str:
        """Post an SDP offer using an ephemeral secret and return the answer SDP.

        Runs under httpx's default timeout rather than ``self.timeout``.
        """
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/realtime",
                params={"model": model},
                content=offer_sdp.encode("utf-8"),
                headers={
                    "Authorization": f"Bearer {client_secret}",
                    "Content-Type": "application/sdp",
                    "OpenAI-Beta": "realtime=v1",
                },
            )
            response.raise_for_status()
            return response.text

    async def ping(self) -> bool:
        """Open a connection to the provider with the service key."""
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/models",
                headers=self.headers,
            )
            response.raise_for_status()
            return True
