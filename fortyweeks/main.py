"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from fortyweeks.core.config import settings
from fortyweeks.core.migrations import ensure_migrations
from fortyweeks.core.structured_logging import build_log_context
from fortyweeks.db.session import engine

logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from fortyweeks.core.rate_limit import limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.images_path.mkdir(parents=True, exist_ok=True)
    settings.videos_path.mkdir(parents=True, exist_ok=True)
    status = ensure_migrations(engine, settings.DB_AUTO_MIGRATE)
    if not status.is_current:
        logger.warning(
            "Database schema is behind head (current=%s head=%s)",
            status.current or "none",
            status.head,
        )
    yield


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="40Weeks API",
    description="Pregnancy tracking and village sharing API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error",
        extra=build_log_context(route=request.url.path, method=request.method),
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ============================================================================
# Routers
# ============================================================================

from fortyweeks.routers import (
    access_requests,
    auth,
    email_admin,
    invites,
    media,
    milestones,
    pages,
    pregnancy,
    public_timeline,
    timeline,
    unsubscribe,
    updates,
    village,
)

app.include_router(auth.router)

# Pregnancy and invite links (invite routes are public)
app.include_router(pregnancy.router)
app.include_router(invites.router)

# Village - access requests first so its paths win over /{member_id}
app.include_router(access_requests.router)
app.include_router(village.router)

# Updates, milestones, and the owner's timeline
app.include_router(updates.router)
app.include_router(milestones.router)
app.include_router(timeline.router)

# Public timeline and share page
app.include_router(public_timeline.router)
app.include_router(pages.router)

# Admin email tools and public unsubscribe links
app.include_router(email_admin.router)
app.include_router(unsubscribe.router)

# Uploaded media
app.include_router(media.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"message": "40Weeks API is running", "status": "healthy"}
