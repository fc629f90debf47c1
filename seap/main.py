"""
SEAP Backend - FastAPI Application
Security awareness platform: phishing simulation campaigns, review and tracking.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from seap.config import settings, DEFAULT_SECRET_KEY
from seap.core.exceptions import SeapException, FatalError, TransientError, ValidationError
from seap.database import init_db, async_session
from seap.schemas.common import ErrorResponse
from seap.services.auth_service import AuthService
from seap.services.notification_service import get_notification_dispatcher

# Import all API routers
from seap.api import auth, users, campaigns, analytics, admin, simulation

# Import models to ensure they are registered with SQLModel
from seap.models import User, Campaign, Event, AuditLog  # noqa: F401

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def check_settings() -> None:
    if not settings.DEV_MODE and (not settings.SECRET_KEY or settings.SECRET_KEY == DEFAULT_SECRET_KEY):
        raise FatalError("SECRET_KEY must be set when DEV_MODE is off")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    check_settings()
    await init_db()
    async with async_session() as session:
        await AuthService(session).ensure_admin(
            settings.BOOTSTRAP_ADMIN_EMAIL, settings.BOOTSTRAP_ADMIN_PASSWORD
        )
    dispatcher = get_notification_dispatcher()
    dispatcher.start()
    yield
    # Shutdown
    await dispatcher.stop()


app = FastAPI(
    title="SEAP API",
    description="Phishing awareness simulation platform",
    version="1.0.0",
    lifespan=lifespan,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 503)}
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SeapException)
async def seap_exception_handler(request: Request, exc: SeapException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg', 'invalid value')}" if location else errors[0].get("msg", message)
    error = ValidationError(message)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeoutError)
@app.exception_handler(TimeoutError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.warning(f"Store unavailable on {request.url.path}: {exc.__class__.__name__}")
    error = TransientError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = FatalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Include all routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(campaigns.router)
app.include_router(analytics.router)
app.include_router(admin.router)
app.include_router(simulation.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "SEAP API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("seap.main:app", host="0.0.0.0", port=8000, reload=settings.DEV_MODE)
