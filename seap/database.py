from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from .config import settings


def _connect_args(url: str) -> dict:
    # Bound every round trip so a stalled store surfaces as a transient failure
    if url.startswith("sqlite"):
        return {"timeout": settings.DB_TIMEOUT_SECONDS}
    if "asyncpg" in url:
        return {
            "timeout": settings.DB_TIMEOUT_SECONDS,
            "command_timeout": settings.ANALYTICS_TIMEOUT_SECONDS,
        }
    return {}


def build_engine(url: str):
    kwargs = {"echo": settings.DB_ECHO, "future": True, "connect_args": _connect_args(url)}
    if not url.startswith("sqlite"):
        kwargs["pool_timeout"] = settings.DB_TIMEOUT_SECONDS
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)

async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session
