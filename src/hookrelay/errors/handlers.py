"""FastAPI exception handlers producing plain-text error responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hookrelay.errors.exceptions import RelayError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        logger.debug(
            "request_failed",
            extra={
                "path": request.url.path,
                "code": exc.code,
                "status_code": exc.status_code,
                "trace_id": getattr(request.state, "trace_id", "unknown"),
            },
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def routing_error_handler(request: Request, exc: StarletteHTTPException):
        # the router answers wrong methods before any handler runs
        if exc.status_code == 405:
            return PlainTextResponse(
                "Method not allowed",
                status_code=405,
                headers=getattr(exc, "headers", None),
            )
        return await http_exception_handler(request, exc)
