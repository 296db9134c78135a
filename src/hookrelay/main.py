"""FastAPI application factory and lifespan management."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hookrelay import __version__
from hookrelay.config import Settings, load_settings
from hookrelay.errors.exceptions import BusError
from hookrelay.messaging.bus import RedisMessageBus
from hookrelay.security.verifier import build_verifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the verifier and bus client on startup; release the bus on shutdown.

    Key material and bus connectivity problems are fatal: the app never
    serves traffic with an unusable verifier or an unreachable bus.
    """
    settings: Settings = app.state.settings

    # Raises ConfigurationError on bad key material
    verifier = build_verifier(settings)

    if not settings.redis_password:
        logger.warning("REDIS_PASSWORD not set, connecting to Redis without a password")

    bus = RedisMessageBus.from_settings(settings)
    try:
        await asyncio.wait_for(bus.ping(), timeout=settings.startup_timeout)
    except (BusError, asyncio.TimeoutError) as exc:
        logger.error("Failed to connect to Redis at %s: %s", settings.redis_addr, str(exc) or "timed out")
        await bus.close()
        raise

    logger.info("Connected to Redis at %s", settings.redis_addr)

    app.state.verifier = verifier
    app.state.bus = bus
    logger.info(
        "hookrelay started (channel=%s, verification=%s)",
        settings.redis_channel,
        verifier.mode,
    )
    yield

    # uvicorn has drained in-flight requests by the time shutdown runs
    await bus.close()
    logger.info("hookrelay shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="hookrelay",
        version=__version__,
        description="Verifies bank webhook deliveries and republishes them on Redis pub/sub.",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings or load_settings()

    from hookrelay.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from hookrelay.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from hookrelay.api.router import api_router
    app.include_router(api_router)

    return app
