"""
Seva+ - Main Application
========================

Back-office API for sanitation and crowd-management staff at mega-events,
plus the backend of the public bilingual website.

Modules:
- Identity: sign-in, sign-out, password reset, bearer-token sessions
- Workforce: staff roster, bulk upload, teams, shifts, headcounts, coverage
- Operations: facilities, tasks, issues with SLA, QR codes
- Outreach: notifications and ads
- Analytics: dashboard summary and CSV exports
- Site: page copy, contact form, staffing demo
- Live: WebSocket mirror of every collection

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects, transition tables
- Infrastructure: Database, identity provider, blob storage, email relay
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

# Configuration
from seva.config import settings

# Infrastructure
from seva.infrastructure.database import close_database, create_tables, get_session_context, init_database
from seva.infrastructure.storage import HttpBlobStorage
from seva.identity.infrastructure import IdentityToolkitClient
from seva.site.infrastructure import HttpEmailRelay, YamlContentStore

# Module Routers
from seva.analytics.interfaces import analytics_router
from seva.identity.interfaces import identity_router
from seva.operations.interfaces import operations_router
from seva.outreach.interfaces import outreach_router
from seva.site.interfaces import site_router
from seva.workforce.interfaces import workforce_router
from seva.shared.api.live import live_router

# Shared
from seva.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    register_exception_handlers,
)
from seva.shared.infrastructure.events import ChangeFeed
from seva.shared.infrastructure.grafana import get_grafana_exporter
from seva.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Create external clients (identity provider, blob storage, email relay)
    4. Create the change feed and metrics exporter

    SHUTDOWN:
    1. Close external clients
    2. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Seva+", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use Alembic in production)
    logger.info("Creating database tables")
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    identity_provider = IdentityToolkitClient()
    blob_storage = HttpBlobStorage()
    email_relay = HttpEmailRelay()
    if not email_relay.is_configured:
        logger.warning("Email relay not configured - contact form submissions will fail")

    # Store collaborators in app state for dependency injection
    app.state.identity_provider = identity_provider
    app.state.blob_storage = blob_storage
    app.state.email_relay = email_relay
    app.state.content_store = YamlContentStore()
    app.state.change_feed = ChangeFeed()
    app.state.metrics_exporter = get_grafana_exporter()

    logger.info("Seva+ started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Seva+")

    await identity_provider.close()
    await blob_storage.close()
    await email_relay.close()

    await close_database()

    logger.info("Seva+ shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Seva+ API",
    description="""
    ## Sanitation & Crowd Management for Mega-Events

    Back-office API for coordinating sanitation staff, facilities and
    field issues, plus the public website backend.

    ---

    ### Workforce
    - Staff roster with search, pagination, CSV export and spreadsheet bulk upload
    - Teams, shifts (red / orange / green) and headcounts
    - Coverage per zone using the 1:8 rule: `required = ceil(headcount / 8)`

    ### Operations
    - Facilities (toilets, bins, water points, helpdesks) with status changes
    - Tasks auto-created for facilities needing maintenance or cleaning
    - Issues with SLA tracking; high and critical issues spawn a task
    - QR codes with print / placement / verification tracking

    ### Outreach
    - Notifications to staff, teams or zones over WhatsApp, SMS or email
    - Ads: announcements, sponsored and emergency notices

    ### Analytics
    - Dashboard summary and CSV exports

    ### Live
    - `WS /live/{collection}?token=...` sends the full list on connect and after every change

    ---

    ### Issue SLA (minutes)

    | Severity | Resolution |
    |----------|-----------|
    | Critical | 60        |
    | High     | 120       |
    | Medium   | 240       |
    | Low      | 480       |

    ---

    Every admin route requires `Authorization: Bearer <ID token>`.
    `/auth/*`, `/site/*`, `/health` and `/` are public.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware ===
app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)
register_exception_handlers(app)

# === Include Module Routers ===
app.include_router(identity_router)
app.include_router(workforce_router)
app.include_router(operations_router)
app.include_router(outreach_router)
app.include_router(analytics_router)
app.include_router(site_router)
app.include_router(live_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "database": "connected",
                        "metrics_exporter": "not_configured",
                        "email_relay": "configured"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns service health status including:
    - Database connectivity
    - Metrics exporter configuration
    - Email relay configuration
    """
    checks = {
        "database": "connected",
        "metrics_exporter": "configured" if request.app.state.metrics_exporter.is_enabled() else "not_configured",
        "email_relay": "configured" if request.app.state.email_relay.is_configured else "not_configured",
    }

    try:
        async with get_session_context() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        checks["database"] = f"error: {str(e)}"

    return {
        "status": "healthy" if checks["database"] == "connected" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"], responses={
    200: {
        "description": "API information",
        "content": {
            "application/json": {
                "example": {
                    "service": "Seva+",
                    "version": "1.0.0",
                    "architecture": "Clean Architecture / Modular Monolith",
                    "docs": "/docs",
                    "health": "/health"
                }
            }
        }
    }
})
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Seva+",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seva.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
