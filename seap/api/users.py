"""
User profile API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.user_service import UserService
from seap.schemas.user import UserResponse, ProfileUpdate
from seap.api.deps import get_current_user, get_clock
from seap.core.clock import Clock
from seap.models.user import User

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user's profile."""
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Change own email and/or password."""
    user_service = UserService(session, clock=clock)
    return await user_service.update_profile(current_user, profile)
