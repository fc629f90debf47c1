"""
Event repository - writes and aggregate reads over simulation events.
"""
import uuid
from typing import Optional, List, Dict, Iterable
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func, delete

from seap.models.campaign import Campaign
from seap.models.event import Event
from seap.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Repository for Event operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Event, session)

    async def recorded_since(
        self,
        campaign_id: uuid.UUID,
        event_type: str,
        ip_address: Optional[str],
        since: datetime
    ) -> bool:
        """Whether a matching event exists at or after `since`."""
        ip_clause = Event.ip_address.is_(None) if ip_address is None else Event.ip_address == ip_address
        query = select(func.count()).select_from(Event).where(
            Event.campaign_id == campaign_id,
            Event.event_type == event_type,
            ip_clause,
            Event.created_at >= since
        )
        return (await self.session.exec(query)).one() > 0

    async def stage_delete_for_campaigns(self, campaign_ids: Iterable[uuid.UUID]) -> None:
        campaign_ids = list(campaign_ids)
        if campaign_ids:
            await self.session.execute(delete(Event).where(Event.campaign_id.in_(campaign_ids)))

    async def count_by_type(self, campaign_ids: Optional[List[uuid.UUID]] = None) -> Dict[str, int]:
        """
        Event tallies per type. `campaign_ids=None` means platform-wide;
        an empty list means a scope with no campaigns.
        """
        if campaign_ids is not None and not campaign_ids:
            return {}
        query = select(Event.event_type, func.count()).group_by(Event.event_type)
        if campaign_ids is not None:
            query = query.where(Event.campaign_id.in_(campaign_ids))
        result = await self.session.exec(query)
        return {event_type: count for event_type, count in result.all()}

    async def count_by_campaign_and_type(
        self, campaign_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, Dict[str, int]]:
        if not campaign_ids:
            return {}
        query = select(Event.campaign_id, Event.event_type, func.count()).where(
            Event.campaign_id.in_(campaign_ids)
        ).group_by(Event.campaign_id, Event.event_type)
        result = await self.session.exec(query)

        counts: Dict[uuid.UUID, Dict[str, int]] = {}
        for campaign_id, event_type, count in result.all():
            counts.setdefault(campaign_id, {})[event_type] = count
        return counts

    async def count_by_owner(self, event_types: Iterable[str]) -> Dict[uuid.UUID, int]:
        """Event tallies per campaign owner, restricted to the given types."""
        query = select(Campaign.user_id, func.count(Event.id)).join(
            Campaign, Campaign.id == Event.campaign_id
        ).where(
            Event.event_type.in_(list(event_types))
        ).group_by(Campaign.user_id)
        result = await self.session.exec(query)
        return {user_id: count for user_id, count in result.all()}

    async def daily_counts(
        self,
        since: datetime,
        campaign_ids: Optional[List[uuid.UUID]] = None
    ) -> Dict[str, int]:
        """Events per calendar day (YYYY-MM-DD) from `since` onward."""
        if campaign_ids is not None and not campaign_ids:
            return {}
        day = func.date(Event.created_at)
        query = select(day.label("day"), func.count(Event.id)).where(
            Event.created_at >= since
        ).group_by(day)
        if campaign_ids is not None:
            query = query.where(Event.campaign_id.in_(campaign_ids))
        result = await self.session.exec(query)
        # Postgres returns date objects, SQLite returns strings
        return {str(row_day): count for row_day, count in result.all()}
