"""
Public simulation schemas (token-addressed, unauthenticated).
"""
import uuid
from typing import Optional
from pydantic import BaseModel


class LandingResponse(BaseModel):
    campaign_id: uuid.UUID
    title: str
    landing_url: Optional[str]
    token: str


class SubmitResponse(BaseModel):
    redirect: str
    message: str = "Form submitted (simulated)"


class AwarenessContent(BaseModel):
    title: str = "You've Been Phished! (Simulated)"
    description: str = (
        "This was a safe, educational simulation designed to teach you about phishing attacks."
    )
    tips: str = (
        "Always verify sender emails, check URLs carefully, and never enter credentials "
        "on suspicious pages."
    )


class AwarenessResponse(BaseModel):
    campaign_id: uuid.UUID
    message: str = "This was a simulated phishing attempt"
    content: AwarenessContent = AwarenessContent()
