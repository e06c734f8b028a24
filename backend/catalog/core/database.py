"""
Database connection and session management.
"""
import asyncio
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import OperationalError, DisconnectionError

from catalog.core.config import settings
from catalog.core.logging import get_logger

logger = get_logger(__name__)

TRANSIENT_ERROR_KEYWORDS = [
    "connection", "timeout", "network", "closed", "lost",
    "server closed", "connection reset"
]


def _engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build engine keyword arguments for the configured backend.

    PostgreSQL (asyncpg) gets a sized pool and server-side keepalives;
    SQLite (aiosqlite, used by the test suite) takes the driver defaults.
    """
    if not database_url.startswith("postgresql"):
        return {"echo": False}

    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "echo": False,  # Use logging system instead to avoid duplicate logs
        "connect_args": {
            "command_timeout": 30,
            "server_settings": {
                "application_name": "data_catalog",
                "tcp_keepalives_idle": "600",
                "tcp_keepalives_interval": "30",
                "tcp_keepalives_count": "3",
            },
        },
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for database models
Base = declarative_base()


def _is_transient(error: Exception) -> bool:
    error_str = str(error).lower()
    return any(keyword in error_str for keyword in TRANSIENT_ERROR_KEYWORDS)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session with retry logic.

    The session is committed when the request handler returns normally and
    rolled back on any exception. Transient connection errors raised while
    opening the session are retried; errors after the handler has started
    are never retried.
    """
    session = await _open_session()
    try:
        yield session
        await session.commit()
    except (OperationalError, DisconnectionError) as e:
        try:
            await session.rollback()
        except Exception:
            pass  # Session may already be invalid
        logger.error(f"Database error: {e}")
        raise
    except Exception:
        try:
            await session.rollback()
        except Exception:
            pass  # Session may already be invalid
        raise
    finally:
        try:
            await session.close()
        except Exception:
            pass


async def _open_session(max_retries: int = 3, retry_delay: float = 1.0) -> AsyncSession:
    """Create a session and check out its connection, retrying transient failures."""
    for attempt in range(max_retries):
        session = AsyncSessionLocal()
        try:
            await session.connection()
            return session
        except (OperationalError, DisconnectionError) as e:
            await session.close()
            if attempt < max_retries - 1 and _is_transient(e):
                logger.warning(
                    f"Database session creation failed (attempt {attempt + 1}/{max_retries}): {e}. "
                    f"Retrying in {retry_delay * (attempt + 1)}s..."
                )
                await asyncio.sleep(retry_delay * (attempt + 1))
                continue
            logger.error(f"Failed to create database session after {attempt + 1} attempt(s): {e}")
            raise


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for a standalone database session.

    Used outside the request cycle: usage-tracking middleware, provisioning
    and application startup.
    """
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception:
        try:
            await session.rollback()
        except Exception:
            pass
        raise
    finally:
        await session.close()


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp used as a client-side column default."""
    return datetime.now(timezone.utc)
