"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine-readable ``code``, a human-readable ``message``
and the HTTP status it maps to. The app factory registers a handler that
renders them as JSON bodies.
"""

from typing import Any


class RelayError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        body = {
            "success": False,
            "code": self.code,
            "message": self.message,
            "error": self.message,
        }
        body.update(self.extra)
        return body


class Unauthorized(RelayError):
    status_code = 401
    code = "AUTH_INVALID"


class Forbidden(RelayError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(RelayError):
    status_code = 404
    code = "SESSION_NOT_FOUND"


class ValidationFailed(RelayError):
    status_code = 400
    code = "VALIDATION_ERROR"


class SequenceError(RelayError):
    status_code = 409
    code = "SEQUENCE_OUT_OF_ORDER"


class InvalidTransition(RelayError):
    status_code = 409
    code = "INVALID_STATE_TRANSITION"


class UpstreamError(RelayError):
    """Provider returned non-2xx or could not be reached.

    ``provider_status`` is the provider's own status code, or ``None`` for
    network failures. The HTTP status mirrors the provider's when present.
    """

    status_code = 502
    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        *,
        provider_status: int | None = None,
        details: str | None = None,
        code: str | None = None,
    ):
        super().__init__(
            message,
            code=code,
            status_code=provider_status or 502,
            extra={"details": details, "status": provider_status},
        )
        self.provider_status = provider_status
        self.details = details


class CredentialIssueError(RelayError):
    status_code = 502
    code = "CREDENTIAL_ERROR"


class PrefetchTimeout(RelayError):
    status_code = 504
    code = "PREFETCH_TIMEOUT"


class InternalError(RelayError):
    status_code = 500
    code = "INTERNAL_ERROR"
