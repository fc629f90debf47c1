"""
Event model - append-only record of anonymous interaction with a simulation.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class EventType(str, Enum):
    LINK_OPENED = "link_opened"
    FORM_SUBMITTED = "form_submitted"
    AWARENESS_VIEWED = "awareness_viewed"
    CLICKED = "clicked"  # legacy alias of link_opened


# Single definition of a "click" for every aggregate query
CLICK_EVENT_TYPES = (EventType.LINK_OPENED.value, EventType.CLICKED.value)

# Only landing hits are collapsed inside the dedup window
DEDUPLICATED_EVENT_TYPES = frozenset({EventType.LINK_OPENED})


def normalize_event_type(event_type) -> EventType:
    """Map legacy types onto their canonical value before storage."""
    event_type = EventType(event_type)
    if event_type == EventType.CLICKED:
        return EventType.LINK_OPENED
    return event_type


class Event(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    campaign_id: uuid.UUID = Field(foreign_key="campaign.id", index=True)

    event_type: str = Field(index=True)
    ip_address: Optional[str] = Field(default=None, index=True)
    user_agent: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
