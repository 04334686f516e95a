"""Main FastAPI application entry point."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.dependencies.services import get_analytics_service, get_domain_verification_service
from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    stop = asyncio.Event()

    async def periodic(name: str, interval: int, job: Callable[[], Awaitable[None]]) -> None:
        """Run ``job`` every ``interval`` seconds until shutdown; a running job is finished."""
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            if stop.is_set():
                break
            try:
                await job()
            except Exception:
                logger.exception("periodic_job_failed", job=name)

    async def recheck_domains() -> None:
        service = get_domain_verification_service()
        result = await service.recheck_due(settings.domain_recheck_batch_size)
        if result["due"]:
            logger.info("domain_recheck_completed", **result)

    async def reconcile_counters() -> None:
        await get_analytics_service().reconcile_counters()

    jobs = []
    if settings.domain_recheck_enabled:
        jobs.append(("domain_recheck", settings.domain_recheck_interval_seconds, recheck_domains))
    if settings.analytics_reconcile_enabled:
        jobs.append(
            (
                "analytics_reconcile",
                settings.analytics_reconcile_interval_seconds,
                reconcile_counters,
            )
        )

    tasks = []
    for name, interval, job in jobs:
        tasks.append(asyncio.create_task(periodic(name, interval, job)))
        logger.info("periodic_job_scheduled", job=name, interval_seconds=interval)
    yield
    stop.set()
    await asyncio.gather(*tasks)
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Personal Profile Pages\n\n"
            "NameDrop hosts one public CV/link-in-bio page per user, reachable "
            "at `<slug>.<base domain>` or at a verified custom domain.\n\n"
            "### Features\n"
            "- **Profiles**: Slug-addressed pages with work history, projects and link tiles\n"
            "- **Custom Domains**: CNAME verification with automatic SSL issuance\n"
            "- **Analytics**: View, link click and resume download counters\n"
            "- **Moderation**: Viewer reports and an audited admin console\n\n"
            "### Authentication\n"
            "Owner and admin endpoints require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n"
            "Endpoints under `/api/v1/public` and `/health` are open.\n\n"
            "### Rate Limits\n"
            "- Public reads: 120 requests/minute\n"
            "- Owner reads: 30 requests/minute\n"
            "- Owner writes: 10 requests/minute"
        ),
        version=settings.app_version,
        debug=settings.debug,
        contact={
            "name": "NameDrop Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {"name": "health", "description": "Health check endpoints"},
            {"name": "users", "description": "Signed-in account"},
            {"name": "profiles", "description": "Owner profile management"},
            {"name": "domains", "description": "Custom domain verification"},
            {"name": "public", "description": "Public profile pages and analytics events"},
            {"name": "moderation", "description": "Viewer reports"},
            {"name": "admin", "description": "Admin console"},
            {"name": "billing", "description": "Subscription webhooks"},
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
