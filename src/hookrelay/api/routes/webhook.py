"""Webhook receiver: verify, decode and republish inbound deliveries.

Request path, each step short-circuiting on failure:

1. only POST is routed here (other methods get 405 from the router);
2. the body is read in full, bounded by size and read timeout (400);
3. ``X-Hook-Signature`` is verified over the exact bytes (401);
4. the body is decoded as a ``WebhookEnvelope`` for logging (400);
5. the unmodified request bytes are published to the configured channel (500).
"""

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from hookrelay.dependencies import AppSettings, Bus, TraceId, Verifier
from hookrelay.errors.exceptions import BadRequestError, BusError, PublishError, SignatureError
from hookrelay.logging_config import bind_request_context
from hookrelay.models.webhook import WebhookEnvelope
from hookrelay.security.verifier import SIGNATURE_HEADER

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhook"])


async def _read_body(request: Request, max_bytes: int, timeout: float) -> bytes:
    """Read the whole request body, rejecting oversized or stalled uploads."""

    async def _collect() -> bytes:
        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > max_bytes:
                raise BadRequestError()
        return bytes(body)

    try:
        return await asyncio.wait_for(_collect(), timeout=timeout)
    except BadRequestError:
        logger.warning("Request body exceeds %d bytes", max_bytes)
        raise
    except asyncio.TimeoutError as exc:
        logger.warning("Timed out reading request body after %.1fs", timeout)
        raise BadRequestError() from exc
    except ClientDisconnect as exc:
        logger.warning("Client disconnected while sending request body")
        raise BadRequestError() from exc


@router.post("/webhook", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    settings: AppSettings,
    verifier: Verifier,
    bus: Bus,
    trace_id: TraceId,
) -> PlainTextResponse:
    """Verify a webhook delivery and publish its raw body to the bus."""
    body = await _read_body(request, settings.max_body_bytes, settings.read_timeout)

    signature = request.headers.get(SIGNATURE_HEADER, "")
    if not verifier.verify(body, signature):
        logger.warning(
            "Invalid signature for webhook (mode=%s, signature_present=%s)",
            verifier.mode,
            bool(signature),
        )
        raise SignatureError()

    try:
        event = WebhookEnvelope.from_body(body)
    except ValidationError as exc:
        # errors() echoes input values, so only the count is logged
        logger.warning("Error parsing webhook event (%d errors)", exc.error_count())
        raise BadRequestError() from exc
    except ValueError as exc:
        logger.warning("Error parsing webhook event: %s", type(exc).__name__)
        raise BadRequestError() from exc

    bind_request_context(trace_id, event.event_type)

    try:
        receivers = await asyncio.wait_for(
            bus.publish(settings.redis_channel, body),
            timeout=settings.publish_timeout,
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            "Timed out publishing event type %s after %.1fs",
            event.event_type,
            settings.publish_timeout,
        )
        raise PublishError() from exc
    except BusError as exc:
        logger.error("Error publishing event type %s: %s", event.event_type, exc)
        raise PublishError() from exc

    logger.info(
        "Published event type %s to channel %s (receivers=%s)",
        event.event_type,
        settings.redis_channel,
        receivers,
    )
    return PlainTextResponse("OK")
