"""
Audit log repository.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.models.audit import AuditLog
from seap.models.user import User
from seap.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Repository for AuditLog operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AuditLog, session)

    def stage(
        self,
        actor_id: uuid.UUID,
        action: str,
        resource_type: str,
        resource_id: Optional[uuid.UUID] = None,
        details: Optional[dict] = None,
        now: Optional[datetime] = None
    ) -> AuditLog:
        """Add an audit entry to the current unit of work without committing."""
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
            created_at=now or datetime.utcnow()
        )
        self.session.add(entry)
        return entry

    async def get_recent_with_actor(self, limit: int = 100) -> List[dict]:
        """Latest audit entries joined with the acting user's email."""
        query = select(AuditLog, User.email).join(
            User, User.id == AuditLog.actor_id, isouter=True
        ).order_by(AuditLog.created_at.desc()).limit(limit)
        result = await self.session.exec(query)
        return [
            {**entry.model_dump(), "actor_email": email or ""}
            for entry, email in result.all()
        ]
