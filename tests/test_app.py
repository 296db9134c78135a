"""Application lifespan and message bus wiring tests."""

import logging
from types import SimpleNamespace

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from hookrelay.errors.exceptions import BusError, ConfigurationError
from hookrelay.main import create_app, lifespan
from hookrelay.messaging.bus import RedisMessageBus
from hookrelay.security.verifier import HmacVerifier

from conftest import TEST_SECRET, make_settings


@pytest.fixture
def patched_bus(monkeypatch, bus):
    """Make the lifespan use the in-memory bus instead of Redis."""
    monkeypatch.setattr(
        "hookrelay.main.RedisMessageBus",
        SimpleNamespace(from_settings=lambda settings: bus),
    )
    return bus


@pytest.mark.asyncio
async def test_lifespan_wires_state_and_closes_bus(patched_bus, caplog):
    app = create_app(make_settings(webhook_secret=TEST_SECRET, redis_password=""))
    with caplog.at_level(logging.WARNING, logger="hookrelay.main"):
        async with lifespan(app):
            assert "REDIS_PASSWORD not set" in caplog.text
            assert isinstance(app.state.verifier, HmacVerifier)
            assert app.state.bus is patched_bus
            assert patched_bus.pings == 1
            assert not patched_bus.closed
    assert patched_bus.closed


@pytest.mark.asyncio
async def test_lifespan_rejects_invalid_public_key(patched_bus):
    app = create_app(make_settings(webhook_secret="not-a-key", webhook_verification_mode="rsa"))
    with pytest.raises(ConfigurationError):
        async with lifespan(app):
            pass
    assert patched_bus.pings == 0


@pytest.mark.asyncio
async def test_lifespan_fails_when_bus_unreachable(patched_bus):
    patched_bus.ping_error = BusError("connection refused")
    app = create_app(make_settings())
    with pytest.raises(BusError):
        async with lifespan(app):
            pass
    assert patched_bus.closed


@pytest.mark.asyncio
async def test_lifespan_fails_when_bus_wedged(patched_bus):
    patched_bus.hang = True
    app = create_app(make_settings(startup_timeout=0.1))
    with pytest.raises(TimeoutError):
        async with lifespan(app):
            pass


class _FailingRedis:
    async def publish(self, channel, payload):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")


class _RecordingRedis:
    def __init__(self):
        self.published = []

    async def publish(self, channel, payload):
        self.published.append((channel, payload))
        return 2


@pytest.mark.asyncio
async def test_redis_bus_publishes_raw_bytes():
    client = _RecordingRedis()
    bus = RedisMessageBus(client, address="localhost:6379")
    assert await bus.publish("events", b'{"eventType":"TEST"}') == 2
    assert client.published == [("events", b'{"eventType":"TEST"}')]


@pytest.mark.asyncio
async def test_redis_bus_wraps_transport_errors():
    bus = RedisMessageBus(_FailingRedis(), address="localhost:6379")
    with pytest.raises(BusError, match="publish"):
        await bus.publish("events", b"{}")
    with pytest.raises(BusError, match="ping"):
        await bus.ping()


@pytest.mark.asyncio
async def test_redis_bus_from_settings_uses_address():
    bus = RedisMessageBus.from_settings(make_settings(redis_addr="redis.internal:6380"))
    assert bus.address == "redis.internal:6380"
    await bus.close()
