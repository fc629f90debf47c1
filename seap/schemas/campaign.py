"""
Campaign schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr

from seap.core.pagination import PaginatedResponse


class CampaignCreate(BaseModel):
    """Create a new campaign."""
    title: str
    description: Optional[str] = None
    email_text: str
    landing_page_url: Optional[str] = None
    expiry_date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Quarterly password reset",
                "description": "IT-themed credential harvesting simulation",
                "email_text": "Your password expires today. Click below to keep it.",
                "landing_page_url": "https://example.com/reset"
            }
        }


class CampaignUpdate(BaseModel):
    """Update campaign content. Only fields sent are changed; send null to clear expiry."""
    title: Optional[str] = None
    description: Optional[str] = None
    email_text: Optional[str] = None
    landing_page_url: Optional[str] = None
    expiry_date: Optional[datetime] = None


class CampaignDecision(BaseModel):
    """Admin approval or rejection."""
    comment: Optional[str] = ""


class ShareCampaignRequest(BaseModel):
    email: EmailStr


class ShareCampaignResponse(BaseModel):
    message: str
    email: str


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str]
    email_text: str
    landing_page_url: Optional[str]
    tracking_token: str
    status: str
    expiry_date: Optional[datetime]
    admin_comment: Optional[str]
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AdminCampaignResponse(CampaignResponse):
    user_email: str = ""


CampaignPage = PaginatedResponse[CampaignResponse]

AdminCampaignPage = PaginatedResponse[AdminCampaignResponse]
