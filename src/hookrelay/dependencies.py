"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from hookrelay.config import Settings
from hookrelay.messaging.bus import MessageBus
from hookrelay.security.verifier import SignatureVerifier


def get_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return request.app.state.settings


def get_verifier(request: Request) -> SignatureVerifier:
    """Return the verifier built at startup."""
    return request.app.state.verifier


def get_bus(request: Request) -> MessageBus:
    """Return the shared message bus client from app state."""
    return request.app.state.bus


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


# Type aliases for dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
Verifier = Annotated[SignatureVerifier, Depends(get_verifier)]
Bus = Annotated[MessageBus, Depends(get_bus)]
TraceId = Annotated[str, Depends(get_trace_id)]
