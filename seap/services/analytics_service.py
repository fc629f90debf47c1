"""
Analytics service - read-side aggregation over campaigns and events.
Everything is computed at query time from exact tallies; nothing is cached.
"""
import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Mapping

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.core.clock import Clock, system_clock
from seap.core.exceptions import TransientError
from seap.models.campaign import CampaignStatus
from seap.models.event import EventType, CLICK_EVENT_TYPES
from seap.models.user import Roles
from seap.repositories.campaign_repo import CampaignRepository
from seap.repositories.event_repo import EventRepository
from seap.repositories.user_repo import UserRepository


def click_count(counts: Mapping[str, int]) -> int:
    return sum(counts.get(event_type, 0) for event_type in CLICK_EVENT_TYPES)


def conversion_rate(awareness_views: int, clicks: int) -> float:
    """Percentage of clicks that reached the awareness page; 0 when there were no clicks."""
    if clicks <= 0:
        return 0.0
    return awareness_views / clicks * 100


def build_timeline(daily: Mapping[str, int], today: datetime, days: int) -> List[dict]:
    """Zero-filled daily buckets ending at `today`, most recent first."""
    timeline = []
    for offset in range(days):
        day = (today - timedelta(days=offset)).date().isoformat()
        timeline.append({"date": day, "count": daily.get(day, 0)})
    return timeline


class AnalyticsService:
    """Service for per-user and platform-wide reporting."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        timeline_days: int = settings.TIMELINE_DAYS,
        timeout: float = settings.ANALYTICS_TIMEOUT_SECONDS
    ):
        self.session = session
        self.clock = clock
        self.timeline_days = timeline_days
        self.timeout = timeout
        self.campaign_repo = CampaignRepository(session)
        self.event_repo = EventRepository(session)
        self.user_repo = UserRepository(session)

    async def _bounded(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise TransientError("Analytics query timed out")

    def _timeline_window(self):
        now = self.clock.now()
        start = (now - timedelta(days=self.timeline_days - 1)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        return now, start

    async def _timeline(self, campaign_ids=None) -> List[dict]:
        now, start = self._timeline_window()
        daily = await self.event_repo.daily_counts(start, campaign_ids)
        return build_timeline(daily, now, self.timeline_days)

    async def get_user_analytics(self, user_id: uuid.UUID) -> dict:
        return await self._bounded(self._user_analytics(user_id))

    async def get_platform_analytics(self) -> dict:
        return await self._bounded(self._platform_analytics())

    async def _user_analytics(self, user_id: uuid.UUID) -> dict:
        status_counts = await self.campaign_repo.count_by_status(user_id)
        campaigns = await self.campaign_repo.list(filters={"user_id": user_id})
        campaign_ids = [campaign.id for campaign in campaigns]

        type_counts = await self.event_repo.count_by_type(campaign_ids)
        clicks = click_count(type_counts)
        awareness_views = type_counts.get(EventType.AWARENESS_VIEWED.value, 0)

        per_campaign = await self.event_repo.count_by_campaign_and_type(campaign_ids)
        performance = []
        for campaign in campaigns:
            counts: Dict[str, int] = per_campaign.get(campaign.id, {})
            performance.append({
                "id": campaign.id,
                "title": campaign.title,
                "status": campaign.status,
                "clicks": click_count(counts),
                "submissions": counts.get(EventType.FORM_SUBMITTED.value, 0),
                "awareness_views": counts.get(EventType.AWARENESS_VIEWED.value, 0),
            })

        return {
            "stats": {
                "total_campaigns": sum(status_counts.values()),
                "approved_campaigns": status_counts[CampaignStatus.APPROVED.value],
                "pending_campaigns": status_counts[CampaignStatus.PENDING.value],
                "rejected_campaigns": status_counts[CampaignStatus.REJECTED.value],
                "total_clicks": clicks,
                "total_submissions": type_counts.get(EventType.FORM_SUBMITTED.value, 0),
                "total_awareness_views": awareness_views,
                "conversion_rate": conversion_rate(awareness_views, clicks),
            },
            "campaigns": performance,
            "timeline": await self._timeline(campaign_ids),
        }

    async def _platform_analytics(self) -> dict:
        status_counts = await self.campaign_repo.count_by_status()
        type_counts = await self.event_repo.count_by_type()
        clicks = click_count(type_counts)
        conversions = type_counts.get(EventType.AWARENESS_VIEWED.value, 0)

        return {
            "stats": {
                "total_users": await self.user_repo.count({"role": Roles.USER}),
                "total_campaigns": sum(status_counts.values()),
                "approved_campaigns": status_counts[CampaignStatus.APPROVED.value],
                "pending_campaigns": status_counts[CampaignStatus.PENDING.value],
                "rejected_campaigns": status_counts[CampaignStatus.REJECTED.value],
                "total_events": sum(type_counts.values()),
                "total_clicks": clicks,
                "total_submissions": type_counts.get(EventType.FORM_SUBMITTED.value, 0),
                "total_conversions": conversions,
                "average_conversion_rate": conversion_rate(conversions, clicks),
            },
            "distribution": [
                {"status": status, "count": count} for status, count in status_counts.items()
            ],
            "timeline": await self._timeline(),
        }
