"""
Authentication schemas.
"""
import uuid
from pydantic import BaseModel, EmailStr


class RegisterRequest(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@company.com",
                "password": "securepassword123"
            }
        }


class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str


class AuthUser(BaseModel):
    id: uuid.UUID
    email: str
    role: str


class TokenResponse(BaseModel):
    """Token response after login or registration."""
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: AuthUser
