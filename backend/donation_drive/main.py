"""
Donation Drive FastAPI Application - Main entry point.

Backend for the donation drive feature of the portfolio blog:

- Campaigns: donation-drive posts with a goal and currency
- Ledger: append-only donations (from captured payments) and expenses
- Transparency: derived statistics reconciling raised vs. distributed funds
- Comments: donor verification gate for transparency page threads
- Notifications: sequential email fan-out to opted-in subscribers

Endpoints are available under /api/v1/{module}/ paths.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from donation_drive import __version__
from donation_drive.core.config import settings
from donation_drive.core.errors import LedgerError
from donation_drive.db.base import init_db
from donation_drive.schemas.common import HealthResponse

from donation_drive.api.v1.campaigns import router as campaigns_router
from donation_drive.api.v1.payments import router as payments_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Note: In production, use migrations instead
    await init_db()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    description="""
Donation drive backend.

## Modules

- **Campaigns**: statistics, transparency report
- **Ledger**: donation capture, expenses
- **Comments**: donor-gated comment access, commenter registration
- **Notifications**: subscriber email batches
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Campaigns module - /api/v1/campaigns/*
app.include_router(
    campaigns_router,
    prefix=f"{settings.API_V1_PREFIX}/campaigns",
    tags=["campaigns"]
)

# Payments module - /api/v1/payments/*
app.include_router(
    payments_router,
    prefix=f"{settings.API_V1_PREFIX}/payments",
    tags=["payments"]
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    """Domain errors carry their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "donation_drive.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
