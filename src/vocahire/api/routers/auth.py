"""Bearer token verification and the development login endpoint."""

import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Header, Request

from ...config import Settings
from ...errors import Forbidden, Unauthorized
from ...models.user import DevLoginRequest, TokenResponse
from ..dependencies import get_app_settings

router = APIRouter()
logger = logging.getLogger(__name__)


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def create_token(user_id: str, secret: str, expiry_hours: int = 24 * 7) -> str:
    """Create a signed ``user_id|expiry|signature`` token."""
    expiry = datetime.now(timezone.utc) + timedelta(hours=expiry_hours)
    # Use | as separator since : appears in ISO timestamps
    payload = f"{user_id}|{expiry.isoformat()}"
    return f"{payload}|{_sign(secret, payload)}"


def verify_token(token: str, secret: str) -> str | None:
    """Verify a token and return user_id if valid."""
    parts = token.split("|")
    if len(parts) != 3:
        return None

    user_id, expiry_str, signature = parts
    expected_sig = _sign(secret, f"{user_id}|{expiry_str}")
    if not user_id or not hmac.compare_digest(signature, expected_sig):
        return None

    try:
        expiry = datetime.fromisoformat(expiry_str)
    except ValueError:
        return None
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    if datetime.now(timezone.utc) > expiry:
        return None

    return user_id


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
) -> str:
    """Dependency to get current authenticated user."""
    if not authorization:
        raise Unauthorized("Invalid or missing authentication token")

    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise Unauthorized("Invalid auth header")
    if scheme.lower() != "bearer":
        raise Unauthorized("Invalid auth scheme")

    settings: Settings = request.app.state.settings
    user_id = verify_token(token.strip(), settings.token_secret)
    if not user_id:
        raise Unauthorized("Invalid or expired token")

    return user_id


@router.post("/dev-login", response_model=TokenResponse)
async def dev_login(
    credentials: DevLoginRequest,
    settings: Settings = Depends(get_app_settings),
):
    """Issue a token for any user id. Only available when dev login is enabled."""
    if not settings.enable_dev_login:
        raise Forbidden("Dev only")

    logger.warning(f"Dev login issued token for user {credentials.user_id}")
    token = create_token(credentials.user_id, settings.token_secret, settings.token_expiry_hours)
    return TokenResponse(access_token=token, user_id=credentials.user_id)
