"""VocaHire realtime session relay."""

__version__ = "0.1.0"
