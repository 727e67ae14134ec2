"""
Failure Injection Tests.

Validates resilience against component failures.
"""

import asyncio
import time

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from courier.app.core.config import settings
from courier.app.core.exceptions import DependencyUnavailableError
from courier.app.core.redis_client import build_redis_client
from courier.app.core.reliability import CircuitBreaker, CircuitOpenError, run_bounded
from courier.app.domain.parcels.parcel_lifecycle import ParcelLifecycle
from courier.app.models.enums import UserRole
from courier.app.services.role_cache import RoleCache


@pytest.mark.asyncio
async def test_circuit_breaker_activates():
    """Test that circuit breaker opens after threshold failures."""
    cb = CircuitBreaker(failure_threshold=2, reset_timeout=1)

    async def failing_func():
        raise ValueError("Boom")

    for _ in range(2):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    with pytest.raises(CircuitOpenError):
        await cb.call(failing_func)


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_recovers():
    """After the reset timeout one trial call closes the circuit again."""
    cb = CircuitBreaker(failure_threshold=1, reset_timeout=5)

    async def failing_func():
        raise ValueError("Boom")

    async def ok_func():
        return "ok"

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    assert cb.state == "OPEN"

    cb.last_failure_time = time.time() - 10
    assert await cb.call(ok_func) == "ok"
    assert cb.state == "CLOSED"
    assert cb.failures == 0


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_failure_reopens():
    cb = CircuitBreaker(failure_threshold=3, reset_timeout=5)
    cb.state = "OPEN"
    cb.last_failure_time = time.time() - 10

    async def failing_func():
        raise ValueError("Boom")

    with pytest.raises(ValueError):
        await cb.call(failing_func)

    assert cb.state == "OPEN"


@pytest.mark.asyncio
async def test_run_bounded_timeout():
    with pytest.raises(DependencyUnavailableError) as exc_info:
        await run_bounded(asyncio.sleep(1), timeout=0.01)

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["dependency"] == "storage"


@pytest.mark.asyncio
async def test_run_bounded_driver_error():
    async def broken():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(DependencyUnavailableError):
        await run_bounded(broken(), timeout=1)


@pytest.mark.asyncio
async def test_run_bounded_passes_integrity_error_through():
    async def duplicate():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    with pytest.raises(IntegrityError):
        await run_bounded(duplicate(), timeout=1)


class BrokenRedis:
    async def get(self, key):
        raise ConnectionError("redis down")

    async def set(self, key, value, ex=None):
        raise ConnectionError("redis down")

    async def delete(self, key):
        raise ConnectionError("redis down")


@pytest.mark.asyncio
async def test_role_cache_fails_open():
    cache = RoleCache(BrokenRedis(), ttl_seconds=60)

    assert await cache.get("alice@courier.io") is None
    await cache.set("alice@courier.io", UserRole.ADMIN)
    await cache.invalidate("alice@courier.io")


@pytest.mark.asyncio
async def test_identity_resolves_with_redis_down(client, admin_user, headers_for, redis_client, mocker):
    """Role resolution falls back to storage when the cache errors."""
    mocker.patch.object(redis_client, "get", side_effect=ConnectionError("redis down"))
    mocker.patch.object(redis_client, "set", side_effect=ConnectionError("redis down"))

    response = await client.get("/riders/pending", headers=headers_for("admin@courier.io"))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_storage_outage_surfaces_as_500(client, user_headers, mocker):
    mocker.patch.object(
        ParcelLifecycle, "get", side_effect=DependencyUnavailableError("storage")
    )

    response = await client.get("/parcels/1", headers=user_headers)

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["details"]["dependency"] == "storage"


@pytest.mark.asyncio
async def test_missing_token_rejected_before_storage(client, mocker):
    """No bearer token is a 401 even when storage is down."""
    lookup = mocker.patch(
        "courier.app.domain.directory.directory_service.DirectoryService.lookup_role",
        side_effect=DependencyUnavailableError("storage"),
    )

    response = await client.get("/riders/pending")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    lookup.assert_not_called()


@pytest.mark.asyncio
async def test_health_reports_role_cache(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["role_cache"] == "up"
    assert "X-Correlation-ID" in response.headers


def test_redis_client_bounds_connect_and_command_time():
    """A hung Redis cannot stall the identity gate past the configured timeout."""
    client = build_redis_client("redis://cache.internal:6379/0", timeout=0.25)

    kwargs = client.connection_pool.connection_kwargs
    assert kwargs["socket_timeout"] == 0.25
    assert kwargs["socket_connect_timeout"] == 0.25


def test_default_redis_client_uses_configured_timeout():
    kwargs = build_redis_client().connection_pool.connection_kwargs

    assert kwargs["socket_timeout"] == settings.redis_timeout_seconds
    assert kwargs["socket_connect_timeout"] == settings.redis_timeout_seconds
