"""
User schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr


class UserResponse(BaseModel):
    """User details response."""
    id: uuid.UUID
    email: str
    role: str
    email_verified: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Update own profile."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
