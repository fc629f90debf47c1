"""
Shared fixtures: in-memory database, controllable clock, captured email and an
HTTP client wired to the same database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DEV_MODE"] = "true"

from datetime import datetime, timedelta
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.api.deps import get_clock
from seap.core.clock import Clock
from seap.core.security import create_access_token, generate_tracking_token, get_password_hash
from seap.database import get_session
from seap.main import app
from seap.models import User, Campaign, Event
from seap.models.user import Roles
from seap.services.email_service import MockEmailService, set_email_service
from seap.services.notification_service import NotificationDispatcher, set_notification_dispatcher


class FakeClock(Clock):
    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 12, 0, 0))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def mailer():
    service = MockEmailService(configured=True)
    set_email_service(service)
    yield service
    set_email_service(None)


@pytest_asyncio.fixture
async def dispatcher(mailer):
    dispatcher = NotificationDispatcher(email_service=mailer, maxsize=10)
    set_notification_dispatcher(dispatcher)
    yield dispatcher
    await dispatcher.stop()
    set_notification_dispatcher(None)


@pytest.fixture
def app_overrides(session_factory, clock, dispatcher):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_clock] = lambda: clock
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app_overrides):
    transport = httpx.ASGITransport(app=app_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def lenient_client(app_overrides):
    """Client that receives the 500 response instead of the re-raised server error."""
    transport = httpx.ASGITransport(app=app_overrides, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(session):
    async def _make(email: str, role: str = Roles.USER, password: str = "password123") -> User:
        user = User(email=email, password_hash=get_password_hash(password), role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user
    return _make


@pytest_asyncio.fixture
async def user(make_user):
    return await make_user("owner@example.com")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin@example.com", role=Roles.ADMIN)


@pytest_asyncio.fixture
async def make_campaign(session, clock):
    async def _make(owner: User, status: str = "pending", **fields) -> Campaign:
        data = {
            "title": "Password expiry notice",
            "email_text": "Your password expires today.",
            "landing_page_url": "https://example.com/login",
            "tracking_token": generate_tracking_token(),
            "status": status,
            "created_at": clock.now(),
            "updated_at": clock.now(),
        }
        data.update(fields)
        campaign = Campaign(user_id=owner.id, **data)
        session.add(campaign)
        await session.commit()
        await session.refresh(campaign)
        return campaign
    return _make


@pytest_asyncio.fixture
async def add_events(session, clock):
    async def _add(
        campaign: Campaign,
        event_type: str,
        count: int = 1,
        at: Optional[datetime] = None,
        ip_address: Optional[str] = None
    ) -> None:
        for _ in range(count):
            session.add(Event(
                campaign_id=campaign.id,
                event_type=event_type,
                ip_address=ip_address,
                created_at=at or clock.now()
            ))
        await session.commit()
    return _add


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({"user_id": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers
