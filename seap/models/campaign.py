"""
Campaign model - simulated phishing exercise awaiting or holding an admin decision.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class CampaignStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return not CAMPAIGN_TRANSITIONS[self]

    def can_transition_to(self, target: "CampaignStatus") -> bool:
        return target in CAMPAIGN_TRANSITIONS[self]


# Approved and rejected are final decisions
CAMPAIGN_TRANSITIONS = {
    CampaignStatus.PENDING: frozenset({CampaignStatus.APPROVED, CampaignStatus.REJECTED}),
    CampaignStatus.APPROVED: frozenset(),
    CampaignStatus.REJECTED: frozenset(),
}

# Fields the owner may edit; status and token are never owner-writable
CONTENT_FIELDS = ("title", "description", "email_text", "landing_page_url", "expiry_date")


class Campaign(SQLModel, table=True):
    """
    Campaign entity.
    The tracking token is generated once at creation and never changes.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    # Content
    title: str
    description: Optional[str] = None
    email_text: str
    landing_page_url: Optional[str] = None

    # Tracking
    tracking_token: str = Field(unique=True, index=True)
    status: str = Field(default=CampaignStatus.PENDING.value, index=True)
    expiry_date: Optional[datetime] = None

    # Review
    admin_comment: Optional[str] = None
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_date is not None and now > self.expiry_date
