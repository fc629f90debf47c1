"""
Public simulation API routes.
No authentication: the tracking token in the path is the only credential.
"""
from fastapi import APIRouter, Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from seap.database import get_session
from seap.services.simulation_service import TrackingResolver
from seap.schemas.simulation import LandingResponse, SubmitResponse, AwarenessResponse
from seap.schemas.common import HealthResponse
from seap.api.deps import get_client_info, get_clock
from seap.core.clock import Clock

router = APIRouter(prefix="/api", tags=["simulation"])


@router.get("/simulate/{token}", response_model=LandingResponse)
async def simulation_landing(
    token: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Resolve the landing page of an approved campaign and record the link open."""
    resolver = TrackingResolver(session, clock=clock)
    return await resolver.landing(token, **get_client_info(request))


@router.post("/simulate/{token}/submit", response_model=SubmitResponse)
async def simulation_submit(
    token: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Record a simulated form submission. The request body is ignored."""
    resolver = TrackingResolver(session, clock=clock)
    return await resolver.submit(token, **get_client_info(request))


@router.get("/awareness/{token}", response_model=AwarenessResponse)
async def simulation_awareness(
    token: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    resolver = TrackingResolver(session, clock=clock)
    return await resolver.awareness(token, **get_client_info(request))


@router.get("/health", response_model=HealthResponse)
async def health():
    return {"status": "healthy"}
