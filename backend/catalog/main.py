"""
FastAPI application entry point with application factory pattern.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from catalog.core.config import settings
from catalog.core.logging import setup_logging, get_logger
from catalog.core.database import engine, Base, get_db_session
from catalog.core.exceptions import register_exception_handlers
from catalog.core.sentry import init_sentry
from catalog.api.health import router as health_router
from catalog.api.metrics import router as metrics_router
from catalog.api.routes import api_router
from catalog.middleware.logging import LoggingMiddleware
from catalog.middleware.metrics import MetricsMiddleware
from catalog.middleware.usage import UsageTrackingMiddleware

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Setup Sentry (if configured)
if settings.SENTRY_DSN:
    init_sentry(dsn=settings.SENTRY_DSN)
    logger.info("Sentry error tracking initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    # Create database tables (in production, use migrations)
    if settings.ENVIRONMENT == "local":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_DEMO_DATA:
        from catalog.provisioning import seed_demo_data

        async with get_db_session() as db:
            counts = await seed_demo_data(db)
        logger.info("Demo data provisioning finished", extra={"provisioned": counts})

    yield

    logger.info("Shutting down application")
    await engine.dispose()


def create_app() -> FastAPI:
    """
    Application factory function.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Data product catalog: lineage, quality metrics and stewardship",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": "Data product catalog: lineage, quality metrics and stewardship",
            "docs": "/docs",
            "health": "/health",
            "api": settings.API_PREFIX,
        }

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(metrics_router)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # Middleware (the last one added runs first)
    if settings.ENABLE_USAGE_TRACKING:
        app.add_middleware(UsageTrackingMiddleware)

    if settings.ENABLE_METRICS:
        app.add_middleware(MetricsMiddleware)

    app.add_middleware(LoggingMiddleware)

    return app


# Create app instance
app = create_app()
