"""
Common schemas used across multiple endpoints.
"""
from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str

    class Config:
        json_schema_extra = {"example": {"message": "Operation successful"}}


class ErrorBody(BaseModel):
    kind: str
    message: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: ErrorBody

    class Config:
        json_schema_extra = {"example": {"error": {"kind": "not_found", "message": "Campaign not found"}}}


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
