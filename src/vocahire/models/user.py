"""User authentication models."""

from pydantic import BaseModel, Field


class DevLoginRequest(BaseModel):
    """Request model for the development login."""
    user_id: str = Field(..., min_length=1, max_length=100)


class TokenResponse(BaseModel):
    """Response model for authentication token."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
