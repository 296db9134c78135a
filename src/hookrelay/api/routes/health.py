"""Health check endpoint."""

import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from hookrelay.dependencies import AppSettings, Bus
from hookrelay.errors.exceptions import BusError, BusUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check(settings: AppSettings, bus: Bus) -> PlainTextResponse:
    """Report 200 when the message bus answers a ping within the health timeout."""
    try:
        await asyncio.wait_for(bus.ping(), timeout=settings.health_timeout)
    except asyncio.TimeoutError as exc:
        logger.error("Health check ping timed out after %.1fs", settings.health_timeout)
        raise BusUnavailableError() from exc
    except BusError as exc:
        logger.error("Health check ping failed: %s", exc)
        raise BusUnavailableError() from exc

    return PlainTextResponse("OK")
