"""Server-side WebSocket channel to the OpenAI Realtime API."""

import base64
import json
import logging
from typing import Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException
from websockets.protocol import State

logger = logging.getLogger(__name__)


class RealtimeChannel(Protocol):
    """A connected provider channel that client input is forwarded to."""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def send_audio(self, audio: bytes) -> None: ...

    async def send_text(self, text: str) -> None: ...

    async def send_control(self, control_type: str) -> None: ...

    async def close(self) -> None: ...


class OpenAIRealtimeChannel:
    """Forwards audio, text and control events over a realtime WebSocket."""

    def __init__(
        self,
        session_id: str,
        api_key: str,
        model: str,
        ws_url: str = "wss://api.openai.com/v1/realtime",
        open_timeout: float = 10.0,
    ):
        self.session_id = session_id
        self.api_key = api_key
        self.model = model
        self.ws_url = ws_url
        self.open_timeout = open_timeout
        self._ws: ClientConnection | None = None

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    async def connect(self) -> None:
        if not self.api_key:
            raise ConnectionError("Realtime provider API key not configured")
        try:
            self._ws = await connect(
                f"{self.ws_url}?model={self.model}",
                additional_headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "OpenAI-Beta": "realtime=v1",
                },
                open_timeout=self.open_timeout,
            )
        except (OSError, WebSocketException) as e:
            raise ConnectionError(f"Failed to open realtime channel: {e}") from e
        logger.info(f"Realtime channel open for session {self.session_id} (model={self.model})")

    async def _send_event(self, event: dict) -> None:
        if not self.is_connected:
            raise ConnectionError(f"Realtime channel for session {self.session_id} is not open")
        try:
            await self._ws.send(json.dumps(event))
        except WebSocketException as e:
            raise ConnectionError(f"Realtime channel send failed: {e}") from e

    async def send_audio(self, audio: bytes) -> None:
        await self._send_event({
            "type": "input_audio_buffer.append",
            "audio": base64.b64encode(audio).decode("ascii"),
        })

    async def send_text(self, text: str) -> None:
        await self._send_event({
            "type": "conversation.item.create",
            "item": {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": text}],
            },
        })
        await self._send_event({"type": "response.create"})

    async def send_control(self, control_type: str) -> None:
        if control_type == "interrupt":
            await self._send_event({"type": "response.cancel"})
        elif control_type == "start":
            await self._send_event({"type": "response.create"})
        else:
            logger.warning(f"Ignoring control '{control_type}' for session {self.session_id}")

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
            logger.info(f"Realtime channel closed for session {self.session_id}")
