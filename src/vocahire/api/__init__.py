"""HTTP API for the realtime relay."""

from .app import create_app

__all__ = ["create_app"]
