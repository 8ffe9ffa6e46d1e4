"""Realtime relay services."""

from .channel_registry import ChannelEntry, ChannelRegistry
from .credentials import CredentialIssuer
from .negotiation import NegotiationRelay
from .realtime_channel import OpenAIRealtimeChannel, RealtimeChannel
from .realtime_provider import RealtimeProviderClient
from .session_lifecycle import SessionLifecycle
from .session_store import SessionStore

__all__ = [
    "ChannelEntry",
    "ChannelRegistry",
    "CredentialIssuer",
    "NegotiationRelay",
    "OpenAIRealtimeChannel",
    "RealtimeChannel",
    "RealtimeProviderClient",
    "SessionLifecycle",
    "SessionStore",
]
