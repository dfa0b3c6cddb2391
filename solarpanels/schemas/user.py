"""User request/response schemas - registration and session API contract."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    login: str = Field(..., min_length=1, max_length=255)
    # bcrypt accepts max 72 bytes; longer passwords cause 500. Minimum length is checked by the endpoint.
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    id: int
    login: str
    is_moderator: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    login: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    is_moderator: bool
