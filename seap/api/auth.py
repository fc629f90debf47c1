"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.auth_service import AuthService
from seap.schemas.auth import RegisterRequest, LoginRequest, TokenResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session)
):
    """Register a new user account. Registration never grants admin."""
    auth_service = AuthService(session)
    return await auth_service.register(email=request.email, password=request.password)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    """Login and get an access token."""
    auth_service = AuthService(session)
    return await auth_service.login(email=request.email, password=request.password)
