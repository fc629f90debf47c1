"""
Event logger - records simulation interaction events.
Recording is best-effort: a storage failure is logged and never reaches the
anonymous visitor's response.
"""
import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from seap.config import settings
from seap.core.clock import Clock, system_clock
from seap.models.event import Event, EventType, DEDUPLICATED_EVENT_TYPES, normalize_event_type
from seap.repositories.event_repo import EventRepository

logger = logging.getLogger(__name__)


class EventLogger:
    """Service for recording simulation events."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        dedup_window_seconds: int = settings.DEDUP_WINDOW_SECONDS
    ):
        self.session = session
        self.clock = clock
        self.dedup_window = timedelta(seconds=dedup_window_seconds)
        self.event_repo = EventRepository(session)

    async def record(
        self,
        campaign_id: uuid.UUID,
        event_type: EventType,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> bool:
        """
        Record one event. Returns True if a row was written, False if it was
        suppressed as a duplicate or could not be stored.

        Landing hits from the same source IP inside the dedup window collapse
        into one event; submissions and awareness views are always recorded.
        """
        event_type = normalize_event_type(event_type)
        now = self.clock.now()

        try:
            if event_type in DEDUPLICATED_EVENT_TYPES:
                since = now - self.dedup_window
                if await self.event_repo.recorded_since(campaign_id, event_type.value, ip_address, since):
                    logger.debug(f"Suppressed duplicate {event_type.value} for campaign {campaign_id}")
                    return False

            self.session.add(Event(
                campaign_id=campaign_id,
                event_type=event_type.value,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=now
            ))
            await self.session.commit()
            return True
        except (SQLAlchemyError, TimeoutError) as e:
            await self.session.rollback()
            logger.error(f"Failed to record {event_type.value} for campaign {campaign_id}: {e}")
            return False
