"""
Campaigns API routes (owner scope).
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.campaign_service import CampaignService
from seap.schemas.campaign import (
    CampaignCreate, CampaignUpdate, CampaignResponse, CampaignPage,
    ShareCampaignRequest, ShareCampaignResponse
)
from seap.schemas.common import MessageResponse
from seap.api.deps import get_current_user, get_clock
from seap.core.clock import Clock
from seap.models.user import User

router = APIRouter(prefix="/api/user/campaigns", tags=["campaigns"])


@router.post("", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Create a new campaign. It starts out pending admin review."""
    campaign_service = CampaignService(session, clock=clock)
    return await campaign_service.create(current_user.id, campaign_data)


@router.get("", response_model=CampaignPage)
async def list_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List own campaigns with optional status filter."""
    campaign_service = CampaignService(session)
    return await campaign_service.list(current_user.id, status, page, limit)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    campaign_service = CampaignService(session)
    return await campaign_service.get(current_user.id, campaign_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: uuid.UUID,
    campaign_data: CampaignUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Update content of a pending campaign."""
    campaign_service = CampaignService(session, clock=clock)
    return await campaign_service.update(campaign_id, current_user.id, campaign_data)


@router.delete("/{campaign_id}", response_model=MessageResponse)
async def delete_campaign(
    campaign_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Delete a campaign and its recorded events."""
    campaign_service = CampaignService(session, clock=clock)
    await campaign_service.delete(campaign_id, current_user.id)
    return {"message": "Campaign deleted successfully"}


@router.post("/{campaign_id}/share", response_model=ShareCampaignResponse)
async def share_campaign(
    campaign_id: uuid.UUID,
    request: ShareCampaignRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Email the simulation link of an approved campaign."""
    campaign_service = CampaignService(session)
    return await campaign_service.share(campaign_id, current_user.id, request.email)
