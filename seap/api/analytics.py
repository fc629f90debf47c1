"""
Analytics and leaderboard API routes.
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.analytics_service import AnalyticsService
from seap.services.leaderboard_service import LeaderboardService
from seap.schemas.analytics import UserAnalytics, LeaderboardEntry
from seap.api.deps import get_current_user, get_clock
from seap.core.clock import Clock
from seap.models.user import User

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/user/analytics", response_model=UserAnalytics)
async def get_user_analytics(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Campaign and event statistics for the current user."""
    analytics_service = AnalyticsService(session, clock=clock)
    return await analytics_service.get_user_analytics(current_user.id)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    leaderboard_service = LeaderboardService(session)
    return await leaderboard_service.get_leaderboard()
