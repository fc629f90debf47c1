"""
User model.
Identity record for campaign authors and administrators.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Roles:
    USER = "user"
    ADMIN = "admin"


class User(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Auth
    email: str = Field(unique=True, index=True)
    password_hash: str
    role: str = Field(default=Roles.USER, index=True)  # user, admin

    email_verified: bool = Field(default=True)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Roles.ADMIN
