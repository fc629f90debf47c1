"""
Audit service - read access to the admin audit trail.
"""
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from seap.config import settings
from seap.repositories.audit_repo import AuditLogRepository


class AuditService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)

    async def get_recent(self, limit: int = settings.AUDIT_LOG_LIMIT) -> List[dict]:
        """Latest entries, newest first, with the acting user's email."""
        return await self.audit_repo.get_recent_with_actor(limit)
