"""Request-scoped access to the services built in the app lifespan."""

from fastapi import Request

from ..config import Settings
from ..services import (
    ChannelRegistry,
    CredentialIssuer,
    NegotiationRelay,
    RealtimeProviderClient,
    SessionLifecycle,
    SessionStore,
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_registry(request: Request) -> ChannelRegistry:
    return request.app.state.registry


def get_provider(request: Request) -> RealtimeProviderClient:
    return request.app.state.provider


def get_issuer(request: Request) -> CredentialIssuer:
    return request.app.state.issuer


def get_relay(request: Request) -> NegotiationRelay:
    return request.app.state.relay


def get_lifecycle(request: Request) -> SessionLifecycle:
    return request.app.state.lifecycle
