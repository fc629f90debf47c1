"""
Leaderboard service - gamification score per campaign author.
"""
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.models.campaign import CampaignStatus
from seap.models.event import EventType, CLICK_EVENT_TYPES
from seap.models.user import Roles
from seap.repositories.campaign_repo import CampaignRepository
from seap.repositories.event_repo import EventRepository
from seap.repositories.user_repo import UserRepository

CLICK_POINTS = 2
CONVERSION_POINTS = 5
REJECTION_PENALTY = 10


def compute_score(clicks: int, conversions: int, rejected: int) -> int:
    return clicks * CLICK_POINTS + conversions * CONVERSION_POINTS - rejected * REJECTION_PENALTY


def rank_entries(entries: List[dict], limit: int) -> List[dict]:
    """Highest score first; equal scores ordered by email, then user id."""
    ranked = sorted(entries, key=lambda e: (-e["score"], e["email"], str(e["user_id"])))[:limit]
    for position, entry in enumerate(ranked, start=1):
        entry["rank"] = position
    return ranked


class LeaderboardService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.event_repo = EventRepository(session)

    async def get_leaderboard(self, limit: int = settings.LEADERBOARD_LIMIT) -> List[dict]:
        users = await self.user_repo.list_by_role(Roles.USER)

        campaigns = await self.campaign_repo.count_by_owner()
        rejected = await self.campaign_repo.count_by_owner(CampaignStatus.REJECTED.value)
        clicks = await self.event_repo.count_by_owner(CLICK_EVENT_TYPES)
        conversions = await self.event_repo.count_by_owner([EventType.AWARENESS_VIEWED.value])

        entries = []
        for user in users:
            entry = {
                "user_id": user.id,
                "email": user.email,
                "total_campaigns": campaigns.get(user.id, 0),
                "total_clicks": clicks.get(user.id, 0),
                "total_conversions": conversions.get(user.id, 0),
                "rejected_count": rejected.get(user.id, 0),
            }
            entry["score"] = compute_score(
                entry["total_clicks"], entry["total_conversions"], entry["rejected_count"]
            )
            entries.append(entry)

        return rank_entries(entries, limit)
