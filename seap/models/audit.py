"""
Audit log model - trail of admin decisions and destructive actions.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class AuditLog(SQLModel, table=True):
    """Append-only audit entry."""
    __tablename__ = "audit_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    actor_id: uuid.UUID = Field(index=True)

    action: str = Field(index=True)
    resource_type: str
    resource_id: Optional[uuid.UUID] = None

    details: Dict[str, Any] = Field(default={}, sa_column=Column(JSON))
    # Example: {"comment": "looks good"}

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


# Action constants for consistency
class Actions:
    APPROVE_CAMPAIGN = "approve_campaign"
    REJECT_CAMPAIGN = "reject_campaign"
    DELETE_CAMPAIGN = "delete_campaign"
    DELETE_USER = "delete_user"
