"""
Analytics and leaderboard schemas.
Conversion rates are kept exact by the services and rounded here for display.
"""
import uuid
from typing import List
from pydantic import BaseModel, field_serializer


class TimelineEntry(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class StatusCount(BaseModel):
    status: str
    count: int


class CampaignPerformance(BaseModel):
    id: uuid.UUID
    title: str
    status: str
    clicks: int
    submissions: int
    awareness_views: int


class UserStats(BaseModel):
    total_campaigns: int
    approved_campaigns: int
    pending_campaigns: int
    rejected_campaigns: int
    total_clicks: int
    total_submissions: int
    total_awareness_views: int
    conversion_rate: float

    @field_serializer("conversion_rate")
    def _round_rate(self, value: float) -> float:
        return round(value, 2)


class UserAnalytics(BaseModel):
    stats: UserStats
    campaigns: List[CampaignPerformance]
    timeline: List[TimelineEntry]


class PlatformStats(BaseModel):
    total_users: int
    total_campaigns: int
    approved_campaigns: int
    pending_campaigns: int
    rejected_campaigns: int
    total_events: int
    total_clicks: int
    total_submissions: int
    total_conversions: int
    average_conversion_rate: float

    @field_serializer("average_conversion_rate")
    def _round_rate(self, value: float) -> float:
        return round(value, 2)


class PlatformAnalytics(BaseModel):
    stats: PlatformStats
    distribution: List[StatusCount]
    timeline: List[TimelineEntry]


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    email: str
    total_campaigns: int
    total_clicks: int
    total_conversions: int
    rejected_count: int
    score: int
