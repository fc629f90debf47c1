"""
Tests for campaign creation, ownership rules and deletion.
"""
import re
import uuid
from datetime import datetime, timezone

import pytest
from sqlmodel import select

import seap.services.campaign_service as campaign_service_module
from seap.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from seap.models import AuditLog, Event
from seap.models.audit import Actions
from seap.schemas.campaign import CampaignCreate, CampaignUpdate
from seap.services.campaign_service import CampaignService


def new_campaign(**overrides) -> CampaignCreate:
    data = {
        "title": "Payroll update",
        "email_text": "Please confirm your bank details.",
        "landing_page_url": "https://example.com/payroll",
    }
    data.update(overrides)
    return CampaignCreate(**data)


class TestCreate:

    @pytest.mark.asyncio
    async def test_new_campaign_is_pending_with_hex_token(self, session, clock, dispatcher, user):
        service = CampaignService(session, clock=clock)
        campaign = await service.create(user.id, new_campaign())

        assert campaign.status == "pending"
        assert campaign.user_id == user.id
        assert re.fullmatch(r"[0-9a-f]{64}", campaign.tracking_token)
        assert campaign.created_at == clock.now()

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, session, clock, dispatcher, user):
        service = CampaignService(session, clock=clock)
        tokens = {(await service.create(user.id, new_campaign())).tracking_token for _ in range(5)}
        assert len(tokens) == 5

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, session, clock, dispatcher, user):
        service = CampaignService(session, clock=clock)
        with pytest.raises(ValidationError):
            await service.create(user.id, new_campaign(title=""))

    @pytest.mark.asyncio
    async def test_blank_email_text_rejected(self, session, clock, dispatcher, user):
        service = CampaignService(session, clock=clock)
        with pytest.raises(ValidationError):
            await service.create(user.id, new_campaign(email_text="   "))

    @pytest.mark.asyncio
    async def test_token_collision_regenerates(self, session, clock, dispatcher, user, make_campaign, monkeypatch):
        await make_campaign(user, tracking_token="a" * 64)
        candidates = iter(["a" * 64, "b" * 64])
        monkeypatch.setattr(campaign_service_module, "generate_tracking_token", lambda: next(candidates))

        campaign = await CampaignService(session, clock=clock).create(user.id, new_campaign())
        assert campaign.tracking_token == "b" * 64

    @pytest.mark.asyncio
    async def test_persistent_collision_is_conflict(self, session, clock, dispatcher, user, make_campaign, monkeypatch):
        await make_campaign(user, tracking_token="a" * 64)
        monkeypatch.setattr(campaign_service_module, "generate_tracking_token", lambda: "a" * 64)

        with pytest.raises(ConflictError):
            await CampaignService(session, clock=clock).create(user.id, new_campaign())

    @pytest.mark.asyncio
    async def test_aware_expiry_stored_as_utc(self, session, clock, dispatcher, user):
        expiry = datetime(2025, 7, 1, 14, 0, tzinfo=timezone.utc)
        campaign = await CampaignService(session, clock=clock).create(user.id, new_campaign(expiry_date=expiry))
        assert campaign.expiry_date == datetime(2025, 7, 1, 14, 0)


class TestOwnership:

    @pytest.mark.asyncio
    async def test_other_users_campaign_looks_absent(self, session, dispatcher, user, make_user, make_campaign):
        other = await make_user("other@example.com")
        campaign = await make_campaign(other)

        with pytest.raises(NotFoundError):
            await CampaignService(session).get(user.id, campaign.id)

    @pytest.mark.asyncio
    async def test_list_only_returns_own_campaigns(self, session, dispatcher, user, make_user, make_campaign):
        other = await make_user("other@example.com")
        await make_campaign(user)
        await make_campaign(user, status="approved")
        await make_campaign(other)

        page = await CampaignService(session).list(user.id)
        assert page["total"] == 2

        approved = await CampaignService(session).list(user.id, status="approved")
        assert approved["total"] == 1


class TestUpdate:

    @pytest.mark.asyncio
    async def test_owner_edits_content(self, session, clock, dispatcher, user, make_campaign):
        campaign = await make_campaign(user)
        clock.advance(minutes=5)

        updated = await CampaignService(session, clock=clock).update(
            campaign.id, user.id, CampaignUpdate(title="New title")
        )
        assert updated.title == "New title"
        assert updated.email_text == "Your password expires today."
        assert updated.status == "pending"
        assert updated.updated_at == clock.now()

    @pytest.mark.asyncio
    async def test_missing_campaign(self, session, dispatcher, user):
        with pytest.raises(NotFoundError):
            await CampaignService(session).update(uuid.uuid4(), user.id, CampaignUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, session, dispatcher, user, make_user, make_campaign):
        other = await make_user("other@example.com")
        campaign = await make_campaign(user)

        with pytest.raises(ForbiddenError):
            await CampaignService(session).update(campaign.id, other.id, CampaignUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_decided_campaign_is_read_only(self, session, dispatcher, user, make_campaign):
        campaign = await make_campaign(user, status="approved")

        with pytest.raises(ConflictError):
            await CampaignService(session).update(campaign.id, user.id, CampaignUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_cannot_blank_title(self, session, dispatcher, user, make_campaign):
        campaign = await make_campaign(user)

        with pytest.raises(ValidationError):
            await CampaignService(session).update(campaign.id, user.id, CampaignUpdate(title=" "))

    @pytest.mark.asyncio
    async def test_status_field_ignored(self, session, dispatcher, user, make_campaign):
        campaign = await make_campaign(user)
        update = CampaignUpdate.model_validate({"description": "d", "status": "approved"})

        updated = await CampaignService(session).update(campaign.id, user.id, update)
        assert updated.status == "pending"
        assert updated.description == "d"


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_cascades_events_and_audits(self, session, clock, dispatcher, user, make_campaign, add_events):
        campaign = await make_campaign(user, status="approved")
        keep = await make_campaign(user, status="approved")
        await add_events(campaign, "link_opened", count=3)
        await add_events(keep, "link_opened")

        await CampaignService(session, clock=clock).delete(campaign.id, user.id)

        events = (await session.exec(select(Event))).all()
        assert [e.campaign_id for e in events] == [keep.id]

        audit = (await session.exec(select(AuditLog))).all()
        assert len(audit) == 1
        assert audit[0].action == Actions.DELETE_CAMPAIGN
        assert audit[0].details == {"title": "Password expiry notice"}

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, session, dispatcher, user, make_user, make_campaign):
        other = await make_user("other@example.com")
        campaign = await make_campaign(user)

        with pytest.raises(ForbiddenError):
            await CampaignService(session).delete(campaign.id, other.id)
