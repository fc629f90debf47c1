"""
Admin API routes - campaign review, user administration and reporting.
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.analytics_service import AnalyticsService
from seap.services.audit_service import AuditService
from seap.services.campaign_service import CampaignService
from seap.services.leaderboard_service import LeaderboardService
from seap.services.user_service import UserService
from seap.schemas.analytics import PlatformAnalytics, LeaderboardEntry
from seap.schemas.audit import AuditLogResponse
from seap.schemas.campaign import AdminCampaignPage, CampaignDecision, CampaignResponse
from seap.schemas.common import MessageResponse
from seap.schemas.user import UserResponse
from seap.api.deps import require_admin, get_clock
from seap.core.clock import Clock
from seap.models.user import User

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/campaigns", response_model=AdminCampaignPage)
async def list_all_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """List every campaign with its owner's email."""
    campaign_service = CampaignService(session)
    return await campaign_service.list_all(status, page, limit)


@router.post("/campaigns/{campaign_id}/approve", response_model=CampaignResponse)
async def approve_campaign(
    campaign_id: uuid.UUID,
    decision: Optional[CampaignDecision] = None,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    campaign_service = CampaignService(session, clock=clock)
    comment = decision.comment if decision else None
    return await campaign_service.approve(campaign_id, admin, comment)


@router.post("/campaigns/{campaign_id}/reject", response_model=CampaignResponse)
async def reject_campaign(
    campaign_id: uuid.UUID,
    decision: CampaignDecision,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Reject a pending campaign. A comment is required."""
    campaign_service = CampaignService(session, clock=clock)
    return await campaign_service.reject(campaign_id, admin, decision.comment)


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    user_service = UserService(session)
    return await user_service.list_users()


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Delete a user together with their campaigns and events."""
    user_service = UserService(session, clock=clock)
    await user_service.delete_user(user_id, admin)
    return {"message": "User deleted successfully"}


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    """Most recent audit entries, newest first."""
    audit_service = AuditService(session)
    return await audit_service.get_recent()


@router.get("/analytics", response_model=PlatformAnalytics)
async def get_platform_analytics(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    analytics_service = AnalyticsService(session, clock=clock)
    return await analytics_service.get_platform_analytics()


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_admin_leaderboard(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session)
):
    leaderboard_service = LeaderboardService(session)
    return await leaderboard_service.get_leaderboard()
