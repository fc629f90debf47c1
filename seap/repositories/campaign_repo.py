"""
Campaign repository.
"""
import uuid
from typing import Optional, List, Dict
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func, update, delete

from seap.core.pagination import paginate_query
from seap.models.campaign import Campaign, CampaignStatus
from seap.models.user import User
from seap.repositories.base import BaseRepository


def _status_histogram(rows) -> Dict[str, int]:
    counts = {status.value: 0 for status in CampaignStatus}
    for status, count in rows:
        counts[status] = counts.get(status, 0) + count
    return counts


class CampaignRepository(BaseRepository[Campaign]):
    """Repository for Campaign operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Campaign, session)

    async def get_by_token(self, token: str) -> Optional[Campaign]:
        return await self.get_by_field("tracking_token", token)

    async def token_exists(self, token: str) -> bool:
        query = select(func.count()).select_from(Campaign).where(Campaign.tracking_token == token)
        return (await self.session.exec(query)).one() > 0

    async def list_for_owner(
        self,
        user_id: uuid.UUID,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        return await self.list_paginated(
            filters={"user_id": user_id, "status": status},
            page=page,
            limit=limit
        )

    async def list_with_owner_email(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """Admin listing: every campaign joined with its owner's email."""
        query = select(Campaign, User.email).join(User, User.id == Campaign.user_id, isouter=True)
        if status:
            query = query.where(Campaign.status == status)
        query = query.order_by(Campaign.created_at.desc())

        page_data = await paginate_query(self.session, query, page, limit)
        page_data["items"] = [
            {**campaign.model_dump(), "user_email": email or ""}
            for campaign, email in page_data["items"]
        ]
        return page_data

    async def ids_for_owner(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        query = select(Campaign.id).where(Campaign.user_id == user_id)
        result = await self.session.exec(query)
        return list(result.all())

    async def compare_and_set_status(
        self,
        campaign_id: uuid.UUID,
        expected: CampaignStatus,
        new_status: CampaignStatus,
        comment: Optional[str],
        reviewer_id: uuid.UUID,
        now: datetime
    ) -> bool:
        """
        Stage a status change that only applies while the stored status still
        equals `expected`. Returns False when another writer got there first.
        The caller commits.
        """
        stmt = (
            update(Campaign)
            .where(Campaign.id == campaign_id, Campaign.status == expected.value)
            .values(
                status=new_status.value,
                admin_comment=comment,
                reviewed_by=reviewer_id,
                reviewed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def stage_delete_for_owner(self, user_id: uuid.UUID) -> None:
        await self.session.execute(delete(Campaign).where(Campaign.user_id == user_id))

    async def count_by_status(self, user_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
        """Campaign counts per status, every status present."""
        query = select(Campaign.status, func.count()).group_by(Campaign.status)
        if user_id is not None:
            query = query.where(Campaign.user_id == user_id)
        result = await self.session.exec(query)
        return _status_histogram(result.all())

    async def count_by_owner(self, status: Optional[str] = None) -> Dict[uuid.UUID, int]:
        query = select(Campaign.user_id, func.count()).group_by(Campaign.user_id)
        if status:
            query = query.where(Campaign.status == status)
        result = await self.session.exec(query)
        return {user_id: count for user_id, count in result.all()}
