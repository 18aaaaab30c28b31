"""
Main FastAPI application entry point.

Wires the trace middleware, the system router and the v1 events router.
Redis clients are created lazily by the container on first use and closed
on shutdown.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from livefeed.core.config import settings
from livefeed.core.container import get_logger, get_redis
from livefeed.presentation.api.middleware.trace_middleware import TraceMiddleware
from livefeed.presentation.routers.api.v1 import events_router
from livefeed.presentation.routers.system import system_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Log effective stream configuration
    - Shutdown: Close the shared Redis connection pool

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    logger = get_logger()
    logger.info(
        "application_started",
        environment=settings.environment.value,
        stream=settings.sse_stream_key,
    )

    yield

    if get_redis.cache_info().currsize:
        await get_redis().aclose()
    logger.info("application_stopped")


# Initialize FastAPI application with settings and lifespan
app = FastAPI(
    title=settings.app_name,
    description="Real-time change notifications over Server-Sent Events",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
    lifespan=lifespan,
)

# Wire trace middleware (request correlation)
app.add_middleware(TraceMiddleware)

app.include_router(system_router)
app.include_router(events_router, prefix=settings.api_v1_prefix)
