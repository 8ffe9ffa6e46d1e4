"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..errors import RelayError, ValidationFailed
from ..services import (
    ChannelRegistry,
    CredentialIssuer,
    NegotiationRelay,
    OpenAIRealtimeChannel,
    RealtimeProviderClient,
    SessionLifecycle,
    SessionStore,
)
from ..services.channel_registry import ChannelFactory
from .routers import auth, realtime, sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _openai_channel_factory(settings: Settings) -> ChannelFactory:
    def factory(session_id: str, model: str) -> OpenAIRealtimeChannel:
        return OpenAIRealtimeChannel(
            session_id=session_id,
            api_key=settings.openai_api_key,
            model=model,
            ws_url=settings.openai_realtime_ws_url,
        )

    return factory


def _build_services(
    app: FastAPI,
    settings: Settings,
    channel_factory: ChannelFactory | None,
    provider_transport: httpx.AsyncBaseTransport | None,
) -> None:
    provider = RealtimeProviderClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        transport=provider_transport,
    )
    store = SessionStore(settings.session_data_path)
    registry = ChannelRegistry(
        channel_factory=channel_factory or _openai_channel_factory(settings),
        session_timeout=settings.session_timeout_seconds,
        cleanup_interval=settings.cleanup_interval_seconds,
    )
    lifecycle = SessionLifecycle(
        store=store,
        registry=registry,
        default_model=settings.realtime_model,
        session_expiry=timedelta(minutes=settings.session_expiry_minutes),
        ice_servers=settings.ice_servers,
    )
    registry.on_expired = lifecycle.expire

    app.state.provider = provider
    app.state.store = store
    app.state.registry = registry
    app.state.lifecycle = lifecycle
    app.state.issuer = CredentialIssuer(
        provider,
        default_model=settings.realtime_model,
        default_voice=settings.realtime_voice,
        default_instructions=settings.realtime_instructions,
    )
    app.state.relay = NegotiationRelay(provider)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        failure = ValidationFailed("Invalid request body", extra={"details": errors})
        return JSONResponse(status_code=failure.status_code, content=failure.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "code": "INTERNAL_ERROR",
                "message": "An internal server error occurred",
                "error": "An internal server error occurred",
            },
        )


def create_app(
    settings: Settings | None = None,
    channel_factory: ChannelFactory | None = None,
    provider_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``channel_factory`` and ``provider_transport`` replace the OpenAI WebSocket
    channel and HTTP transport, mainly for tests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the services and run the channel sweeper for the app's lifetime."""
        app_settings = settings or get_settings()
        app_settings.ensure_data_dirs()
        app.state.settings = app_settings
        _build_services(app, app_settings, channel_factory, provider_transport)
        app.state.registry.start()
        logger.info("VocaHire realtime relay starting up...")
        yield
        await app.state.registry.shutdown()
        logger.info("VocaHire realtime relay shutting down...")

    app = FastAPI(
        title="VocaHire Realtime Relay",
        description="Realtime session negotiation and lifecycle API for AI mock interviews",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["sessions"])
    app.include_router(realtime.router, prefix="/api/v1/realtime", tags=["realtime"])

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        registry: ChannelRegistry = request.app.state.registry
        return {"status": "healthy", "version": "0.1.0", "openChannels": len(registry)}

    return app
