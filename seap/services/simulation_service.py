"""
Tracking resolver - the public, token-addressed simulation flow.
Landing → submit → awareness, each step gated on the campaign being approved.
"""
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.core.clock import Clock, system_clock
from seap.core.exceptions import NotFoundError, ForbiddenError, CampaignExpiredError
from seap.core.security import is_well_formed_tracking_token
from seap.models.campaign import Campaign, CampaignStatus
from seap.models.event import EventType
from seap.repositories.campaign_repo import CampaignRepository
from seap.services.event_service import EventLogger

logger = logging.getLogger(__name__)


class TrackingResolver:
    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        enforce_expiry: bool = settings.ENFORCE_CAMPAIGN_EXPIRY
    ):
        self.session = session
        self.clock = clock
        self.enforce_expiry = enforce_expiry
        self.campaign_repo = CampaignRepository(session)
        self.event_logger = EventLogger(session, clock=clock)

    async def resolve(self, token: str) -> Campaign:
        """
        Map a tracking token to a live campaign.
        Unknown and malformed tokens get the same NotFound so probing learns nothing.
        """
        if not is_well_formed_tracking_token(token):
            raise NotFoundError("Campaign")

        campaign = await self.campaign_repo.get_by_token(token)
        if not campaign:
            raise NotFoundError("Campaign")

        if campaign.status != CampaignStatus.APPROVED.value:
            raise ForbiddenError("Campaign not approved")

        if self.enforce_expiry and campaign.is_expired(self.clock.now()):
            raise CampaignExpiredError()

        return campaign

    async def landing(self, token: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> dict:
        campaign = await self.resolve(token)
        # Read before recording: a failed write rolls back and expires the instance
        page = {
            "campaign_id": campaign.id,
            "title": campaign.title,
            "landing_url": campaign.landing_page_url,
            "token": token,
        }
        await self.event_logger.record(page["campaign_id"], EventType.LINK_OPENED, ip_address, user_agent)
        return page

    async def submit(self, token: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> dict:
        """Record a simulated form submission. The submitted fields are never read."""
        campaign = await self.resolve(token)
        await self.event_logger.record(campaign.id, EventType.FORM_SUBMITTED, ip_address, user_agent)
        return {"redirect": f"{settings.API_PREFIX}/awareness/{token}"}

    async def awareness(self, token: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> dict:
        campaign_id = (await self.resolve(token)).id
        await self.event_logger.record(campaign_id, EventType.AWARENESS_VIEWED, ip_address, user_agent)
        return {"campaign_id": campaign_id}
