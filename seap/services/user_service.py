"""
User service - profile management and admin user administration.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.core.clock import Clock, system_clock
from seap.core.exceptions import raise_already_exists, raise_not_found, raise_validation_error
from seap.core.security import get_password_hash
from seap.models.audit import Actions
from seap.models.user import User
from seap.repositories.audit_repo import AuditLogRepository
from seap.repositories.campaign_repo import CampaignRepository
from seap.repositories.event_repo import EventRepository
from seap.repositories.user_repo import UserRepository
from seap.schemas.user import ProfileUpdate


class UserService:
    """Service for user operations."""

    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self.session = session
        self.clock = clock
        self.user_repo = UserRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.event_repo = EventRepository(session)
        self.audit_repo = AuditLogRepository(session)

    async def update_profile(self, user: User, profile: ProfileUpdate) -> User:
        update_data = {}

        if profile.email and profile.email.lower() != user.email:
            email = profile.email.lower()
            existing = await self.user_repo.get_by_email(email)
            if existing and existing.id != user.id:
                raise_already_exists("User", "email", email)
            update_data["email"] = email

        if profile.password:
            update_data["password_hash"] = get_password_hash(profile.password)

        if not update_data:
            return user
        return await self.user_repo.update(user.id, update_data, now=self.clock.now())

    async def list_users(self) -> List[User]:
        return await self.user_repo.list()

    async def delete_user(self, user_id: uuid.UUID, admin: User) -> None:
        """Remove a user together with their campaigns and those campaigns' events."""
        if user_id == admin.id:
            raise_validation_error("Cannot delete yourself")

        user = await self.user_repo.get(user_id)
        if not user:
            raise_not_found("User", str(user_id))

        async with self.user_repo.transaction():
            campaign_ids = await self.campaign_repo.ids_for_owner(user_id)
            await self.event_repo.stage_delete_for_campaigns(campaign_ids)
            await self.campaign_repo.stage_delete_for_owner(user_id)
            await self.session.delete(user)
            self.audit_repo.stage(
                actor_id=admin.id,
                action=Actions.DELETE_USER,
                resource_type="user",
                resource_id=user_id,
                details={"deleted_user_id": str(user_id), "deleted_campaigns": len(campaign_ids)},
                now=self.clock.now()
            )
