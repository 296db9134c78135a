"""Master API router. Paths are mounted at the root."""

from fastapi import APIRouter

from hookrelay.api.routes import health, webhook

api_router = APIRouter()

api_router.include_router(webhook.router)
api_router.include_router(health.router)
