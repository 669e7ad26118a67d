"""TradeBoost — FastAPI Application Entry Point.

Wires the call-tracking, spend, dashboard, account and compliance routers,
and runs table creation plus the optional spend-refresh scheduler on
startup.
"""

import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradeboost.config import settings
from tradeboost.database import mask_url, db_url, init_db, test_connection
from tradeboost.scheduler.jobs import start_scheduler, stop_scheduler
from tradeboost.api.account_routes import router as account_router
from tradeboost.api.call_routes import router as call_router
from tradeboost.api.compliance_routes import router as compliance_router
from tradeboost.api.metrics_routes import router as metrics_router
from tradeboost.core.errors import (
    ConfigurationError,
    NotAuthenticatedError,
    RecordNotFoundError,
    TradeBoostError,
)
from tradeboost.core.logging import get_logger

logger = get_logger("main")

VERSION = "1.0.0"

# Serverless hosts freeze the process between requests; no background jobs there
IS_SERVERLESS = any(os.environ.get(v) for v in ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    mode = "serverless" if IS_SERVERLESS else "long-running"
    logger.info(f"TradeBoost {VERSION} starting ({mode})")

    if test_connection():
        try:
            init_db()
        except Exception as e:
            logger.error(f"Table creation failed: {e}")
    else:
        logger.error(f"Database unreachable at {mask_url(db_url)}; requests will fail")

    scheduled = not IS_SERVERLESS
    if scheduled:
        start_scheduler()
    try:
        yield
    finally:
        if scheduled:
            stop_scheduler()
        logger.info("TradeBoost stopped")


app = FastAPI(
    title="TradeBoost",
    description=(
        "Qualified-call tracking, Google Ads spend reconciliation, "
        "cost-per-lead dashboard and UK ad-copy compliance for trades businesses."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (call_router, metrics_router, account_router, compliance_router):
    app.include_router(router)


# ── Middleware & error mapping ──


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "endpoint": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response


@app.exception_handler(TradeBoostError)
async def domain_error_handler(request: Request, exc: TradeBoostError):
    """Fallback for domain errors a route did not translate itself."""
    if isinstance(exc, NotAuthenticatedError):
        status_code = 401
    elif isinstance(exc, RecordNotFoundError):
        status_code = 404
    elif isinstance(exc, ConfigurationError):
        status_code = 500
    else:
        status_code = 400
    logger.warning(
        f"{type(exc).__name__}: {exc}",
        extra={"endpoint": request.url.path, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# ── System ──


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "healthy", "service": "tradeboost", "version": VERSION}


@app.get("/debug/db", tags=["System"])
async def debug_db():
    """Database reachability, with credentials masked."""
    return {
        "connected": test_connection(),
        "backend": db_url.split(":", 1)[0].split("+", 1)[0],
        "url": mask_url(db_url),
        "scheduler": "enabled" if settings.scheduler_enabled and not IS_SERVERLESS else "disabled",
    }
