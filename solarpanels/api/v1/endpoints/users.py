"""
User endpoints - registration, login and logout.
Secure auth, validation, clear status codes.
"""

import logging

from fastapi import APIRouter, status

from solarpanels.cache.redis_client import Blacklist
from solarpanels.config import get_settings
from solarpanels.core.dependencies import CurrentPrincipal
from solarpanels.core.exceptions import BadRequest, Conflict, Unauthenticated
from solarpanels.core.security import (
    create_access_token,
    hash_password,
    remaining_lifetime_seconds,
    verify_password,
)
from solarpanels.db.models.user import User
from solarpanels.db.repositories.user_repository import UserRepository
from solarpanels.db.session import DbSession
from solarpanels.schemas.solar_request import MessageResponse
from solarpanels.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(session: DbSession, data: UserCreate):
    """Create new user with role User. Returns user without password."""
    if len(data.password) < settings.min_password_length:
        raise BadRequest(f"Password must be at least {settings.min_password_length} characters")
    repo = UserRepository(session)
    existing = await repo.get_by_login(data.login)
    if existing:
        raise Conflict("Login already registered")
    user = User(
        login=data.login,
        hashed_password=hash_password(data.password),
        is_moderator=False,
    )
    user = await repo.add(user)
    await repo.commit()
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(session: DbSession, data: LoginRequest):
    """Authenticate and return JWT carrying user id and role."""
    repo = UserRepository(session)
    user = await repo.get_by_login(data.login)
    if not user or not verify_password(data.password, user.hashed_password):
        raise Unauthenticated("Invalid login or password")
    token = create_access_token(user.id, user.role.value)
    return TokenResponse(
        access_token=token,
        expires_in=settings.jwt_expire_minutes * 60,
        is_moderator=user.is_moderator,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(principal: CurrentPrincipal, blacklist: Blacklist):
    """Revoke the presented token until it would have expired anyway."""
    await blacklist.revoke(principal.token, remaining_lifetime_seconds(principal.expires_at))
    logger.info("User %s logged out", principal.user_id)
    return MessageResponse(message="Logged out")
