"""
Authentication service - registration, login and admin bootstrap.
"""
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.core.exceptions import raise_already_exists, raise_unauthorized
from seap.core.security import get_password_hash, verify_password, create_access_token
from seap.models.user import User, Roles
from seap.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


def _token_response(user: User) -> dict:
    token = create_access_token({"user_id": str(user.id), "role": user.role})
    return {
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": {"id": user.id, "email": user.email, "role": user.role},
    }


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def register(self, email: str, password: str, role: str = Roles.USER) -> dict:
        """Register a new account and sign it in."""
        email = email.lower()
        if await self.user_repo.get_by_email(email):
            raise_already_exists("User", "email", email)

        user = await self.user_repo.create({
            "email": email,
            "password_hash": get_password_hash(password),
            "role": role,
            "email_verified": True,
        })
        logger.info(f"Registered {role} account {user.id}")
        return _token_response(user)

    async def login(self, email: str, password: str) -> dict:
        user = await self.user_repo.get_by_email(email.lower())
        if not user or not verify_password(password, user.password_hash):
            raise_unauthorized("Invalid credentials")

        if not user.is_active:
            raise_unauthorized("User account is deactivated")

        await self.user_repo.update_last_login(user)
        return _token_response(user)

    async def ensure_admin(self, email: Optional[str], password: Optional[str]) -> Optional[User]:
        """Create the bootstrap admin account if it does not exist yet."""
        if not email or not password:
            return None

        email = email.lower()
        existing = await self.user_repo.get_by_email(email)
        if existing:
            return existing

        user = await self.user_repo.create({
            "email": email,
            "password_hash": get_password_hash(password),
            "role": Roles.ADMIN,
            "email_verified": True,
        })
        logger.info(f"Created bootstrap admin {user.id}")
        return user
