"""
HTTP-level tests: routing, auth gates and the error envelope.
"""
import asyncio
from datetime import timedelta

import pytest
from sqlmodel import select

from seap.core.security import create_access_token
from seap.models import AuditLog, Campaign, Event, User
from seap.repositories.campaign_repo import CampaignRepository
from seap.services.email_service import EmailService
from seap.services.notification_service import NotificationDispatcher, set_notification_dispatcher


CAMPAIGN = {
    "title": "Invoice overdue",
    "email_text": "An invoice is overdue, open the attachment.",
    "landing_page_url": "https://example.com/invoice",
}


def error_kind(response) -> str:
    return response.json()["error"]["kind"]


class RefusingEmailService(EmailService):
    async def send_email(self, to, subject, body, html_body=None) -> bool:
        return False


class GatedEmailService(EmailService):
    """Holds every send until `release` is set."""

    def __init__(self):
        self.release = asyncio.Event()
        self.sent = []

    async def send_email(self, to, subject, body, html_body=None) -> bool:
        await self.release.wait()
        self.sent.append(to)
        return True


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestAuth:

    @pytest.mark.asyncio
    async def test_register_and_login(self, client):
        response = await client.post("/api/auth/register", json={"email": "New@Example.com", "password": "pw123456"})
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == "user"
        assert body["user"]["email"] == "new@example.com"

        response = await client.post("/api/auth/login", json={"email": "new@example.com", "password": "pw123456"})
        assert response.status_code == 200
        token = response.json()["token"]

        profile = await client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})
        assert profile.json()["email"] == "new@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflict(self, client, user):
        response = await client.post("/api/auth/register", json={"email": user.email, "password": "x"})
        assert response.status_code == 409
        assert error_kind(response) == "conflict"

    @pytest.mark.asyncio
    async def test_bad_credentials(self, client, user):
        response = await client.post("/api/auth/login", json={"email": user.email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json() == {"error": {"kind": "unauthorized", "message": "Invalid credentials"}}

    @pytest.mark.asyncio
    async def test_missing_and_garbage_tokens(self, client):
        assert (await client.get("/api/user/campaigns")).status_code == 401
        response = await client.get("/api/user/campaigns", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert error_kind(response) == "unauthorized"

    @pytest.mark.asyncio
    async def test_profile_update(self, client, user, make_user, auth_headers):
        await make_user("taken@example.com")

        response = await client.put("/api/user/profile", json={"email": "taken@example.com"}, headers=auth_headers(user))
        assert response.status_code == 409

        response = await client.put(
            "/api/user/profile", json={"email": "renamed@example.com", "password": "newpass"}, headers=auth_headers(user)
        )
        assert response.status_code == 200
        assert response.json()["email"] == "renamed@example.com"

        login = await client.post("/api/auth/login", json={"email": "renamed@example.com", "password": "newpass"})
        assert login.status_code == 200


class TestCampaignFlow:

    @pytest.mark.asyncio
    async def test_end_to_end(self, client, session, user, admin, mailer, dispatcher, auth_headers):
        owner, reviewer = auth_headers(user), auth_headers(admin)

        response = await client.post("/api/user/campaigns", json={**CAMPAIGN, "title": ""}, headers=owner)
        assert response.status_code == 400
        assert error_kind(response) == "validation_error"

        response = await client.post("/api/user/campaigns", json=CAMPAIGN, headers=owner)
        assert response.status_code == 201
        campaign = response.json()
        assert campaign["status"] == "pending"
        token = campaign["tracking_token"]

        response = await client.get(f"/api/simulate/{token}")
        assert response.status_code == 403
        assert error_kind(response) == "forbidden"

        response = await client.post(f"/api/admin/campaigns/{campaign['id']}/reject", json={}, headers=reviewer)
        assert response.status_code == 400

        response = await client.post(
            f"/api/admin/campaigns/{campaign['id']}/approve", json={"comment": "looks good"}, headers=reviewer
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        response = await client.post(f"/api/admin/campaigns/{campaign['id']}/approve", headers=reviewer)
        assert response.status_code == 409

        response = await client.put(f"/api/user/campaigns/{campaign['id']}", json={"title": "x"}, headers=owner)
        assert response.status_code == 409

        landing = await client.get(f"/api/simulate/{token}", headers={"User-Agent": "pytest-browser"})
        assert landing.status_code == 200
        assert landing.json()["title"] == "Invoice overdue"
        assert landing.json()["landing_url"] == "https://example.com/invoice"

        submit = await client.post(f"/api/simulate/{token}/submit", data={"password": "hunter2"})
        assert submit.json()["redirect"] == f"/api/awareness/{token}"

        awareness = await client.get(f"/api/awareness/{token}")
        assert awareness.status_code == 200
        assert awareness.json()["content"]["title"]

        events = (await session.exec(select(Event))).all()
        assert sorted(e.event_type for e in events) == ["awareness_viewed", "form_submitted", "link_opened"]
        assert all("hunter2" not in (e.user_agent or "") for e in events)

        analytics = (await client.get("/api/user/analytics", headers=owner)).json()
        assert analytics["stats"]["total_clicks"] == 1
        assert analytics["stats"]["conversion_rate"] == 100.0

        logs = (await client.get("/api/admin/audit-logs", headers=reviewer)).json()
        assert logs[0]["action"] == "approve_campaign"
        assert logs[0]["actor_email"] == admin.email
        assert logs[0]["details"] == {"comment": "looks good"}

        board = (await client.get("/api/leaderboard", headers=owner)).json()
        assert board[0]["email"] == user.email
        assert board[0]["score"] == 1 * 2 + 1 * 5

        await dispatcher.join()
        assert mailer.get_last_email()["to"] == user.email

    @pytest.mark.asyncio
    async def test_share_requires_approval(self, client, user, make_campaign, mailer, auth_headers):
        pending = await make_campaign(user)
        approved = await make_campaign(user, status="approved")

        response = await client.post(
            f"/api/user/campaigns/{pending.id}/share", json={"email": "friend@example.com"}, headers=auth_headers(user)
        )
        assert response.status_code == 400

        response = await client.post(
            f"/api/user/campaigns/{approved.id}/share", json={"email": "friend@example.com"}, headers=auth_headers(user)
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Campaign link sent successfully", "email": "friend@example.com"}
        assert mailer.get_last_email()["to"] == "friend@example.com"
        assert approved.tracking_token in mailer.get_last_email()["body"]

    @pytest.mark.asyncio
    async def test_share_without_email_provider(self, client, user, make_campaign, mailer, auth_headers):
        approved = await make_campaign(user, status="approved")
        mailer.is_configured = False

        response = await client.post(
            f"/api/user/campaigns/{approved.id}/share", json={"email": "friend@example.com"}, headers=auth_headers(user)
        )
        assert response.status_code == 503
        assert error_kind(response) == "transient"

    @pytest.mark.asyncio
    async def test_owner_delete(self, client, session, user, make_user, make_campaign, add_events, auth_headers):
        other = await make_user("other@example.com")
        campaign = await make_campaign(user, status="approved")
        campaign_id = campaign.id
        await add_events(campaign, "link_opened", count=2)

        response = await client.delete(f"/api/user/campaigns/{campaign_id}", headers=auth_headers(other))
        assert response.status_code == 403

        response = await client.delete(f"/api/user/campaigns/{campaign_id}", headers=auth_headers(user))
        assert response.status_code == 200

        response = await client.get(f"/api/user/campaigns/{campaign_id}", headers=auth_headers(user))
        assert response.status_code == 404
        assert (await session.exec(select(Event))).all() == []

    @pytest.mark.asyncio
    async def test_missing_body_field(self, client, user, auth_headers):
        response = await client.post(
            "/api/user/campaigns", json={"title": "No body"}, headers=auth_headers(user)
        )
        assert response.status_code == 400
        assert error_kind(response) == "validation_error"

    @pytest.mark.asyncio
    async def test_malformed_tracking_token(self, client):
        response = await client.get("/api/simulate/not-a-token")
        assert response.status_code == 404
        assert error_kind(response) == "not_found"


class TestAdmin:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", [
        "/api/admin/campaigns", "/api/admin/users", "/api/admin/audit-logs",
        "/api/admin/analytics", "/api/admin/leaderboard",
    ])
    async def test_admin_routes_reject_users(self, client, user, path, auth_headers):
        response = await client.get(path, headers=auth_headers(user))
        assert response.status_code == 403
        assert error_kind(response) == "forbidden"

    @pytest.mark.asyncio
    async def test_admin_campaign_list_includes_owner_email(self, client, user, admin, make_campaign, auth_headers):
        await make_campaign(user)
        await make_campaign(user, status="approved")

        response = await client.get("/api/admin/campaigns", params={"status": "pending"}, headers=auth_headers(admin))
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["user_email"] == user.email

    @pytest.mark.asyncio
    async def test_delete_user_cascades(self, client, session, user, admin, make_campaign, add_events, auth_headers):
        user_id = user.id
        campaign = await make_campaign(user, status="approved")
        await add_events(campaign, "link_opened", count=3)

        response = await client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 400

        response = await client.delete(f"/api/admin/users/{user_id}", headers=auth_headers(admin))
        assert response.status_code == 200

        assert (await session.exec(select(User).where(User.id == user_id))).all() == []
        assert (await session.exec(select(Campaign))).all() == []
        assert (await session.exec(select(Event))).all() == []
        audit = (await session.exec(select(AuditLog))).all()
        assert audit[0].action == "delete_user"
        assert audit[0].details["deleted_user_id"] == str(user_id)

    @pytest.mark.asyncio
    async def test_platform_analytics_shape(self, client, admin, auth_headers):
        body = (await client.get("/api/admin/analytics", headers=auth_headers(admin))).json()
        assert body["stats"]["total_users"] == 0
        assert len(body["timeline"]) == 30
        assert {row["status"] for row in body["distribution"]} == {"pending", "approved", "rejected"}


class TestShareDelivery:

    @pytest.mark.asyncio
    async def test_immediate_delivery_failure_is_transient(self, client, user, make_campaign, auth_headers):
        approved = await make_campaign(user, status="approved")
        set_notification_dispatcher(NotificationDispatcher(email_service=RefusingEmailService()))

        response = await client.post(
            f"/api/user/campaigns/{approved.id}/share", json={"email": "friend@example.com"}, headers=auth_headers(user)
        )
        assert response.status_code == 503
        assert response.json() == {"error": {"kind": "transient", "message": "Failed to send email"}}

    @pytest.mark.asyncio
    async def test_slow_delivery_continues_in_background(self, client, user, make_campaign, auth_headers):
        approved = await make_campaign(user, status="approved")
        provider = GatedEmailService()
        dispatcher = NotificationDispatcher(email_service=provider)
        set_notification_dispatcher(dispatcher)

        response = await client.post(
            f"/api/user/campaigns/{approved.id}/share", json={"email": "friend@example.com"}, headers=auth_headers(user)
        )
        assert response.status_code == 200
        assert provider.sent == []

        provider.release.set()
        await dispatcher.join()
        assert provider.sent == ["friend@example.com"]


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_read_timeout_is_transient(self, client, monkeypatch):
        async def timed_out(self, token):
            raise TimeoutError()

        monkeypatch.setattr(CampaignRepository, "get_by_token", timed_out)

        response = await client.get(f"/api/simulate/{'a' * 64}")
        assert response.status_code == 503
        assert error_kind(response) == "transient"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_fatal(self, lenient_client, monkeypatch):
        async def broken(self, token):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(CampaignRepository, "get_by_token", broken)

        response = await lenient_client.get(f"/api/simulate/{'a' * 64}")
        assert response.status_code == 500
        assert response.json() == {"error": {"kind": "fatal", "message": "Internal server error"}}

    @pytest.mark.asyncio
    async def test_expired_access_token(self, client, user):
        token = create_access_token(
            {"user_id": str(user.id), "role": user.role}, expires_delta=timedelta(minutes=-5)
        )
        response = await client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert error_kind(response) == "unauthorized"
