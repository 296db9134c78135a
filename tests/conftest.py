"""Shared test fixtures."""

import asyncio
import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from hookrelay.config import Settings
from hookrelay.main import create_app
from hookrelay.security.verifier import build_verifier

TEST_SECRET = "test-secret"


class FakeBus:
    """In-memory MessageBus recording every publish."""

    def __init__(self):
        self.published: list[tuple[str, bytes]] = []
        self.publish_error: Exception | None = None
        self.ping_error: Exception | None = None
        self.hang = False
        self.pings = 0
        self.closed = False

    async def publish(self, channel: str, payload: bytes) -> int:
        if self.hang:
            await asyncio.sleep(3600)
        if self.publish_error is not None:
            raise self.publish_error
        self.published.append((channel, payload))
        return 1

    async def ping(self) -> None:
        self.pings += 1
        if self.hang:
            await asyncio.sleep(3600)
        if self.ping_error is not None:
            raise self.ping_error

    async def close(self) -> None:
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = {"redis_channel": "test", "webhook_secret": ""}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_app(bus, **overrides):
    """Create an app with state normally set up by the lifespan."""
    settings = make_settings(**overrides)
    app = create_app(settings)
    app.state.verifier = build_verifier(settings)
    app.state.bus = bus
    return app


@pytest.fixture
def bus():
    return FakeBus()


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key_b64(rsa_private_key):
    der = rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


@pytest.fixture
def app(bus):
    """App in open mode (no secret configured)."""
    return make_app(bus)


@pytest.fixture
def hmac_app(bus):
    """App verifying HMAC-SHA512 signatures with TEST_SECRET."""
    return make_app(bus, webhook_secret=TEST_SECRET)


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def hmac_client(hmac_app):
    transport = ASGITransport(app=hmac_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
