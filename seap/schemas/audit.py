"""
Audit log schemas.
"""
import uuid
from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    actor_id: uuid.UUID
    actor_email: str
    action: str
    resource_type: str
    resource_id: Optional[uuid.UUID]
    details: Dict[str, Any]
    created_at: datetime
