"""
API dependencies - shared across all routes.
"""
import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.config import settings
from seap.core.clock import Clock, system_clock
from seap.core.security import verify_access_token
from seap.core.exceptions import raise_unauthorized, raise_forbidden
from seap.models.user import User
from seap.repositories.user_repo import UserRepository


bearer_scheme = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    """Time source for request handling (overridden in tests)."""
    return system_clock


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from the bearer token."""
    if not credentials or not credentials.credentials:
        raise_unauthorized("Authorization header required")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise_unauthorized("Invalid or expired token")

    try:
        user_id = uuid.UUID(payload.get("user_id", ""))
    except (TypeError, ValueError, AttributeError):
        raise_unauthorized("Invalid or expired token")

    user_repo = UserRepository(session)
    user = await user_repo.get(user_id)

    if not user:
        raise_unauthorized("User not found")

    if not user.is_active:
        raise_unauthorized("User account is deactivated")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise_forbidden("Admin access required")
    return current_user


def get_client_info(request: Request) -> dict:
    """
    Extract client info from request.
    X-Forwarded-For is only honoured behind a trusted proxy; the first hop is the client.
    """
    ip_address = request.client.host if request.client else None
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip() or ip_address

    return {
        "ip_address": ip_address,
        "user_agent": request.headers.get("user-agent")
    }
