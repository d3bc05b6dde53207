"""FastAPI application with lifespan management."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from xenon_gatekeeper.api.middleware import (
    IpBlockMiddleware,
    RequestLoggingMiddleware,
    TenantContextMiddleware,
)
from xenon_gatekeeper.api.routes.branches import router as branches_router
from xenon_gatekeeper.api.routes.license import router as license_router
from xenon_gatekeeper.api.routes.pricing import router as pricing_router
from xenon_gatekeeper.api.routes.security import router as security_router
from xenon_gatekeeper.api.routes.users import router as users_router
from xenon_gatekeeper.billing.plans import load_plan_catalog
from xenon_gatekeeper.billing.pricing import PricingCalculator
from xenon_gatekeeper.config import settings
from xenon_gatekeeper.errors import AccessDeniedError, LicenseLimitExceededError
from xenon_gatekeeper.logging_config import configure_logging
from xenon_gatekeeper.security.abuse import SecurityEventMonitor
from xenon_gatekeeper.security.blocklist import InMemoryIpBlocklist
from xenon_gatekeeper.storage.database import async_session, engine

logger = structlog.get_logger()

HEALTH_CHECK_TIMEOUT = 5.0

# Process-wide; single-instance only (replace with a shared store for scaling)
ip_blocklist = InMemoryIpBlocklist()
security_monitor = SecurityEventMonitor(
    ip_blocklist,
    threshold=settings.brute_force_threshold,
    window=settings.brute_force_window,
    block_duration=settings.ip_block_duration,
)


async def _cleanup_loop(
    blocklist: InMemoryIpBlocklist,
    monitor: SecurityEventMonitor,
    interval_seconds: int,
) -> None:
    """Periodic purge of expired blocks and stale failure windows."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            expired = await asyncio.to_thread(blocklist.cleanup)
            stale = await asyncio.to_thread(monitor.cleanup)
            if expired or stale:
                logger.debug(
                    "security_cleanup",
                    blocks_removed=expired,
                    failure_windows_removed=stale,
                )
        except Exception:
            logger.exception("security_cleanup_error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Startup:
        - Configure logging.
        - Load the plan catalog into a PricingCalculator.
        - Start the block list / monitor cleanup task.
    Shutdown:
        - Cancel cleanup task.
        - Dispose database engine (close connection pool).
    """
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )
    catalog = load_plan_catalog(settings.plan_catalog_path)
    app.state.pricing_calculator = PricingCalculator(catalog)

    cleanup_task = asyncio.create_task(
        _cleanup_loop(
            ip_blocklist,
            security_monitor,
            settings.security_cleanup_interval_seconds,
        )
    )

    logger.info(
        "app_started",
        environment=str(settings.environment),
        plans=len(catalog.active_plans()),
    )
    yield

    cleanup_task.cancel()
    await engine.dispose()
    logger.info("app_stopped")


app = FastAPI(
    title="Xenon Gatekeeper",
    description="Tenant-scoped request authorization, licensing guardrails and pricing",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.is_dev,
)

app.state.ip_blocklist = ip_blocklist
app.state.security_monitor = security_monitor

# Starlette runs the last-added middleware first:
# CORS -> request logging -> tenant context -> IP block gate -> routes.
app.add_middleware(IpBlockMiddleware, blocklist=ip_blocklist)
app.add_middleware(
    TenantContextMiddleware,
    settings=settings,
    monitor=security_monitor,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.get("/health")
async def health() -> JSONResponse:
    """Deep health check: verifies DB connectivity."""
    checks: dict[str, str] = {}
    overall = "ok"

    try:
        async with async_session() as session:
            await asyncio.wait_for(
                session.execute(text("SELECT 1")),
                timeout=HEALTH_CHECK_TIMEOUT,
            )
        checks["db"] = "ok"
    except (TimeoutError, OperationalError, SQLAlchemyError) as e:
        logger.warning("health_check_db_error", error=type(e).__name__)
        checks["db"] = f"error: {type(e).__name__}"
        overall = "degraded"
    except Exception as e:
        logger.error("health_check_db_unexpected", error=str(e), exc_info=True)
        checks["db"] = f"error: {type(e).__name__}"
        overall = "degraded"

    status_code = 200 if overall == "ok" else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": overall,
            "checks": checks,
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
        },
    )


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(
    request: Request,
    exc: AccessDeniedError,
) -> JSONResponse:
    """Authorization failures: logged with context, generic body."""
    logger.warning("access_denied", path=request.url.path, reason=str(exc))
    return JSONResponse(status_code=403, content={"detail": "Forbidden"})


@app.exception_handler(LicenseLimitExceededError)
async def license_limit_handler(
    request: Request,
    exc: LicenseLimitExceededError,
) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "detail": f"Plan limit reached for {exc.resource}",
            "resource": exc.resource,
            "limit": exc.limit,
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(license_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")
app.include_router(branches_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(security_router, prefix="/api/v1")
