"""Shared fixtures: fake provider channel, stubbed provider HTTP API, test app."""

from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from vocahire.api import create_app
from vocahire.api.routers.auth import create_token
from vocahire.config import Settings

TEST_SECRET = "test-token-secret"
ANSWER_SDP = "v=0\r\no=- 42 2 IN IP4 127.0.0.1\r\ns=-\r\nt=0 0\r\n"
EPHEMERAL_KEY = "ek_test_1234567890"


class FakeChannel:
    """In-memory stand-in for the provider WebSocket channel."""

    def __init__(self, session_id: str, model: str, fail_connect: bool = False) -> None:
        self.session_id = session_id
        self.model = model
        self.fail_connect = fail_connect
        self.audio: list[bytes] = []
        self.texts: list[str] = []
        self.controls: list[str] = []
        self.closed = False
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        if self.fail_connect:
            raise ConnectionError("provider refused connection")
        self._connected = True

    def _check(self) -> None:
        if not self._connected:
            raise ConnectionError("Not connected")

    async def send_audio(self, audio: bytes) -> None:
        self._check()
        self.audio.append(audio)

    async def send_text(self, text: str) -> None:
        self._check()
        self.texts.append(text)

    async def send_control(self, control_type: str) -> None:
        self._check()
        self.controls.append(control_type)

    async def close(self) -> None:
        self._connected = False
        self.closed = True


class FakeChannelFactory:
    """Builds FakeChannels and remembers them by session id."""

    def __init__(self) -> None:
        self.channels: dict[str, FakeChannel] = {}
        self.fail_connect = False

    def __call__(self, session_id: str, model: str) -> FakeChannel:
        channel = FakeChannel(session_id, model, fail_connect=self.fail_connect)
        self.channels[session_id] = channel
        return channel


class ProviderStub:
    """Routes httpx.MockTransport requests like the realtime provider would."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.sdp_status = 200
        self.sdp_body = ANSWER_SDP
        self.sessions_status = 200
        self.sessions_body: dict = {
            "id": "sess_abc",
            "client_secret": {"value": EPHEMERAL_KEY, "expires_at": 1893456000},
        }
        self.models_status = 200
        self.raise_network_error = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_network_error:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if request.method == "POST" and path.endswith("/realtime/sessions"):
            return httpx.Response(self.sessions_status, json=self.sessions_body)
        if request.method == "POST" and path.endswith("/realtime"):
            return httpx.Response(self.sdp_status, text=self.sdp_body)
        if request.method == "GET" and path.endswith("/models"):
            return httpx.Response(self.models_status, json={"data": []})
        return httpx.Response(404, json={"error": "unknown route"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="sk-service-key",
        openai_base_url="https://provider.test/v1",
        token_secret=TEST_SECRET,
        session_data_path=tmp_path / "sessions",
        enable_dev_login=True,
        cleanup_interval_seconds=3600,
    )


@pytest.fixture
def channel_factory() -> FakeChannelFactory:
    return FakeChannelFactory()


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def client(
    settings: Settings,
    channel_factory: FakeChannelFactory,
    provider_stub: ProviderStub,
) -> Iterator[TestClient]:
    app = create_app(
        settings=settings,
        channel_factory=channel_factory,
        provider_transport=provider_stub.transport,
    )
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(user_id, TEST_SECRET)}"}


@pytest.fixture
def alice() -> dict[str, str]:
    return auth_headers("alice")


@pytest.fixture
def bob() -> dict[str, str]:
    return auth_headers("bob")
