"""
User repository.
"""
from typing import Optional, List
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.models.user import User, Roles
from seap.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        query = select(User).where(User.email == email)
        result = await self.session.exec(query)
        return result.first()

    async def list_by_role(self, role: str = Roles.USER) -> List[User]:
        query = select(User).where(User.role == role).order_by(User.created_at)
        result = await self.session.exec(query)
        return list(result.all())

    async def update_last_login(self, user: User) -> None:
        """Update user's last login timestamp."""
        user.last_login_at = datetime.utcnow()
        self.session.add(user)
        await self.commit()
