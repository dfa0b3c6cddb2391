"""
FastAPI dependencies - authentication gate for every request operation.
Resolves the bearer token to a Principal (user id + role) or rejects the call.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from solarpanels.cache.redis_client import Blacklist, TokenBlacklist
from solarpanels.core.exceptions import Forbidden, Unauthenticated
from solarpanels.core.roles import Role
from solarpanels.core.security import decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: Role
    token: str
    expires_at: int

    @property
    def is_moderator(self) -> bool:
        return self.role is Role.MODERATOR


async def resolve_principal(
    credentials: HTTPAuthorizationCredentials | None,
    blacklist: TokenBlacklist,
) -> Principal:
    """Validate signature, expiry, claims and revocation. Raises Unauthenticated."""
    if not credentials or not credentials.credentials:
        raise Unauthenticated("Not authenticated")
    token = credentials.credentials
    payload = decode_access_token(token)
    if not payload or "sub" not in payload:
        raise Unauthenticated("Invalid or expired token")
    try:
        user_id = int(payload["sub"])
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthenticated("Invalid token claims")
    if await blacklist.is_revoked(token):
        raise Unauthenticated("Token has been revoked")
    return Principal(user_id=user_id, role=role, token=token, expires_at=int(payload["exp"]))


def require_roles(*roles: Role):
    """Build a dependency that requires a valid token and, if given, one of `roles`."""

    async def dependency(
        blacklist: Blacklist,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    ) -> Principal:
        principal = await resolve_principal(credentials, blacklist)
        if roles and principal.role not in roles:
            raise Forbidden("Operation not allowed for this role")
        return principal

    return dependency


# Optional auth: for routes that behave differently when logged in
async def get_optional_principal(
    blacklist: Blacklist,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal | None:
    """Return the principal if a valid token is present, else None."""
    if not credentials:
        return None
    try:
        return await resolve_principal(credentials, blacklist)
    except Unauthenticated:
        return None
    except Exception:
        logger.warning("Optional auth degraded to anonymous", exc_info=True)
        return None


CurrentPrincipal = Annotated[Principal, Depends(require_roles(Role.USER, Role.MODERATOR))]
ModeratorPrincipal = Annotated[Principal, Depends(require_roles(Role.MODERATOR))]
OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]
