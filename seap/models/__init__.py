# Models package - registers every table with SQLModel metadata
from seap.models.user import User
from seap.models.campaign import Campaign
from seap.models.event import Event
from seap.models.audit import AuditLog
