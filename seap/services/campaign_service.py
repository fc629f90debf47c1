"""
Campaign service - campaign lifecycle management.
Owners create and edit pending campaigns; admins move them to a final decision.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.core.clock import Clock, system_clock
from seap.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    TransientError,
    raise_forbidden,
    raise_not_found,
    raise_validation_error,
)
from seap.core.security import generate_tracking_token
from seap.models.audit import Actions
from seap.models.campaign import Campaign, CampaignStatus, CONTENT_FIELDS
from seap.models.user import User
from seap.repositories.audit_repo import AuditLogRepository
from seap.repositories.campaign_repo import CampaignRepository
from seap.repositories.event_repo import EventRepository
from seap.repositories.user_repo import UserRepository
from seap.schemas.campaign import CampaignCreate, CampaignUpdate
from seap.services.notification_service import NotificationDispatcher, get_notification_dispatcher

logger = logging.getLogger(__name__)

TOKEN_GENERATION_ATTEMPTS = 5

DECISION_ACTIONS = {
    CampaignStatus.APPROVED: Actions.APPROVE_CAMPAIGN,
    CampaignStatus.REJECTED: Actions.REJECT_CAMPAIGN,
}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Timestamps are stored as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CampaignService:
    """Service for campaign operations."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        notifier: Optional[NotificationDispatcher] = None
    ):
        self.session = session
        self.clock = clock
        self.notifier = notifier or get_notification_dispatcher()
        self.campaign_repo = CampaignRepository(session)
        self.event_repo = EventRepository(session)
        self.user_repo = UserRepository(session)
        self.audit_repo = AuditLogRepository(session)

    async def _new_tracking_token(self) -> str:
        for _ in range(TOKEN_GENERATION_ATTEMPTS):
            token = generate_tracking_token()
            if not await self.campaign_repo.token_exists(token):
                return token
        raise ConflictError("Could not allocate a unique tracking token")

    async def _get_or_404(self, campaign_id: uuid.UUID) -> Campaign:
        campaign = await self.campaign_repo.get(campaign_id)
        if not campaign:
            raise_not_found("Campaign", str(campaign_id))
        return campaign

    async def create(self, user_id: uuid.UUID, campaign_data: CampaignCreate) -> Campaign:
        """Create a new campaign in pending status."""
        if _is_blank(campaign_data.title) or _is_blank(campaign_data.email_text):
            raise_validation_error("Title and email text are required")

        now = self.clock.now()
        data = campaign_data.model_dump()
        data["expiry_date"] = _as_naive_utc(data.get("expiry_date"))
        data.update({
            "user_id": user_id,
            "tracking_token": await self._new_tracking_token(),
            "status": CampaignStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        })
        return await self.campaign_repo.create(data)

    async def get(self, user_id: uuid.UUID, campaign_id: uuid.UUID) -> Campaign:
        """Get one of the caller's campaigns. Other users' campaigns look absent."""
        campaign = await self.campaign_repo.get(campaign_id)
        if not campaign or campaign.user_id != user_id:
            raise_not_found("Campaign", str(campaign_id))
        return campaign

    async def list(
        self,
        user_id: uuid.UUID,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """List the caller's campaigns with optional status filter."""
        return await self.campaign_repo.list_for_owner(user_id, status, page, limit)

    async def list_all(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        """Admin view over every campaign, with owner emails."""
        return await self.campaign_repo.list_with_owner_email(status, page, limit)

    async def update(
        self,
        campaign_id: uuid.UUID,
        actor_id: uuid.UUID,
        campaign_data: CampaignUpdate
    ) -> Campaign:
        """Update content fields of a pending campaign owned by the actor."""
        campaign = await self._get_or_404(campaign_id)
        if campaign.user_id != actor_id:
            raise_forbidden("Not authorized to update this campaign")

        if campaign.status != CampaignStatus.PENDING.value:
            raise ConflictError("Only pending campaigns can be edited")

        update_data = {
            field: value
            for field, value in campaign_data.model_dump(exclude_unset=True).items()
            if field in CONTENT_FIELDS
        }
        for field in ("title", "email_text"):
            if field in update_data and _is_blank(update_data[field]):
                raise_validation_error("must not be empty", field)
        if "expiry_date" in update_data:
            update_data["expiry_date"] = _as_naive_utc(update_data["expiry_date"])

        return await self.campaign_repo.update(campaign_id, update_data, now=self.clock.now())

    async def transition(
        self,
        campaign_id: uuid.UUID,
        actor: User,
        new_status: CampaignStatus,
        comment: Optional[str] = None
    ) -> Campaign:
        """
        Record an admin decision: status change, audit entry and owner notification.
        The status write only lands if the campaign is still in the status read here.
        """
        if not actor.is_admin:
            raise_forbidden("Admin access required")

        try:
            new_status = CampaignStatus(new_status)
        except ValueError:
            raise_validation_error(f"Unknown campaign status '{new_status}'")

        comment = (comment or "").strip()
        if new_status == CampaignStatus.REJECTED and not comment:
            raise_validation_error("Comment is required for rejection")

        campaign = await self._get_or_404(campaign_id)
        current = CampaignStatus(campaign.status)
        if not current.can_transition_to(new_status):
            raise InvalidTransitionError(current.value, new_status.value)

        now = self.clock.now()
        async with self.campaign_repo.transaction():
            changed = await self.campaign_repo.compare_and_set_status(
                campaign_id, current, new_status, comment or None, actor.id, now
            )
            if not changed:
                raise InvalidTransitionError(current.value, new_status.value)

            self.audit_repo.stage(
                actor_id=actor.id,
                action=DECISION_ACTIONS[new_status],
                resource_type="campaign",
                resource_id=campaign_id,
                details={"comment": comment},
                now=now
            )

        await self.session.refresh(campaign)
        logger.info(f"Campaign {campaign_id} {new_status.value} by {actor.id}")

        await self._notify_owner(campaign, new_status, comment)
        return campaign

    async def approve(self, campaign_id: uuid.UUID, actor: User, comment: Optional[str] = None) -> Campaign:
        return await self.transition(campaign_id, actor, CampaignStatus.APPROVED, comment)

    async def reject(self, campaign_id: uuid.UUID, actor: User, comment: Optional[str] = None) -> Campaign:
        return await self.transition(campaign_id, actor, CampaignStatus.REJECTED, comment)

    async def _notify_owner(self, campaign: Campaign, status: CampaignStatus, comment: str) -> None:
        owner = await self.user_repo.get(campaign.user_id)
        if not owner:
            logger.warning(f"Could not find owner {campaign.user_id} of campaign {campaign.id}")
            return

        link = None
        if status == CampaignStatus.APPROVED:
            link = settings.simulation_link(campaign.tracking_token)
        self.notifier.notify_campaign_decision(owner.email, campaign.title, status.value, comment, link)

    async def delete(self, campaign_id: uuid.UUID, actor_id: uuid.UUID) -> None:
        """Delete an owned campaign together with all of its events."""
        campaign = await self._get_or_404(campaign_id)
        if campaign.user_id != actor_id:
            raise_forbidden("Not authorized to delete this campaign")

        title = campaign.title
        async with self.campaign_repo.transaction():
            await self.event_repo.stage_delete_for_campaigns([campaign_id])
            await self.session.delete(campaign)
            self.audit_repo.stage(
                actor_id=actor_id,
                action=Actions.DELETE_CAMPAIGN,
                resource_type="campaign",
                resource_id=campaign_id,
                details={"title": title},
                now=self.clock.now()
            )

    async def share(self, campaign_id: uuid.UUID, actor_id: uuid.UUID, recipient: str) -> dict:
        """
        Email the simulation link of an approved campaign.
        A fast delivery failure is reported; slower delivery continues in the background.
        """
        campaign = await self.get(actor_id, campaign_id)
        if campaign.status != CampaignStatus.APPROVED.value:
            raise_validation_error("Only approved campaigns can be shared")

        if not self.notifier.email_service.is_configured:
            raise TransientError("Email service is not configured. Please contact administrator.")

        link = settings.simulation_link(campaign.tracking_token)
        outcome = await self.notifier.share_campaign(recipient, campaign.title, link)
        if outcome is False:
            raise TransientError("Failed to send email")

        return {"message": "Campaign link sent successfully", "email": recipient}
