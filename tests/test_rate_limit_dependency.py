"""Tests for the enforce_rate_limit dependency and its HTTP behavior."""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from admin_api.core.app_factory import create_app
from admin_api.core.errors import RateLimitAppError
from admin_api.core.rate_limit import client_identity, enforce_rate_limit
from conftest import FakeClock, make_settings


def _request(app, client: tuple[str, int] | None) -> Request:
    return Request(
        {
            "type": "http",
            "app": app,
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "path": "/api/contacts",
            "root_path": "",
            "query_string": b"",
            "headers": [],
            "client": client,
        }
    )


def test_admits_quota_then_returns_429(make_client, auth_headers, clock: FakeClock) -> None:
    client = make_client(rate_limit_requests=3, rate_limit_window_seconds=60)

    for _ in range(3):
        assert client.get("/api/contacts", headers=auth_headers).status_code == 200

    throttled = client.get("/api/contacts", headers=auth_headers)
    assert throttled.status_code == 429
    body = throttled.json()
    assert body["error"]["code"] == "rate_limit_exceeded"
    assert body["error"]["message"] == "Too many requests. Please try again later."
    assert throttled.headers["Retry-After"] == "60"
    assert throttled.headers["X-RateLimit-Limit"] == "3"
    assert throttled.headers["X-RateLimit-Remaining"] == "0"

    clock.advance(60)
    assert client.get("/api/contacts", headers=auth_headers).status_code == 200


def test_quota_is_shared_across_api_routes(make_client, auth_headers) -> None:
    client = make_client(rate_limit_requests=2)

    assert client.get("/api/contacts", headers=auth_headers).status_code == 200
    assert client.get("/api/orders", headers=auth_headers).status_code == 200
    assert client.get("/api/tasks", headers=auth_headers).status_code == 429


def test_cache_hits_still_count_against_quota(make_client, auth_headers) -> None:
    client = make_client(rate_limit_requests=2)

    client.get("/api/contacts", headers=auth_headers)
    assert client.get("/api/contacts", headers=auth_headers).headers["X-Cache"] == "HIT"
    assert client.get("/api/contacts", headers=auth_headers).status_code == 429


def test_headers_can_be_disabled(make_client, auth_headers) -> None:
    client = make_client(rate_limit_requests=1, rate_limit_include_headers=False)

    client.get("/api/contacts", headers=auth_headers)
    throttled = client.get("/api/contacts", headers=auth_headers)

    assert throttled.status_code == 429
    assert "Retry-After" not in throttled.headers
    assert "X-RateLimit-Limit" not in throttled.headers


def test_limiter_runs_before_authentication(make_client) -> None:
    client = make_client(rate_limit_requests=2)

    assert client.get("/api/contacts").status_code == 401
    assert client.get("/api/contacts").status_code == 401
    assert client.get("/api/contacts").status_code == 429


def test_health_is_not_rate_limited(make_client) -> None:
    client = make_client(rate_limit_requests=1)

    for _ in range(5):
        assert client.get("/health").status_code == 200


def test_disabled_limiter_admits_everything(make_client, auth_headers) -> None:
    client = make_client(rate_limit_enabled=False, rate_limit_requests=1)

    for _ in range(5):
        assert client.get("/api/contacts", headers=auth_headers).status_code == 200
    assert client.app.state.rate_limiter is None


def test_client_identity_uses_peer_address(clock: FakeClock) -> None:
    app = create_app(make_settings(), clock=clock)

    assert client_identity(_request(app, ("10.0.0.7", 5123))) == "ip:10.0.0.7"
    assert client_identity(_request(app, None)) == "ip:unknown"


@pytest.mark.asyncio
async def test_clients_have_independent_quotas(clock: FakeClock) -> None:
    app = create_app(make_settings(rate_limit_requests=2), clock=clock)
    client_a = ("10.0.0.1", 1000)
    client_b = ("10.0.0.2", 1000)

    await enforce_rate_limit(_request(app, client_a))
    await enforce_rate_limit(_request(app, client_a))
    with pytest.raises(RateLimitAppError):
        await enforce_rate_limit(_request(app, client_a))

    await enforce_rate_limit(_request(app, client_b))
    await enforce_rate_limit(_request(app, client_b))


@pytest.mark.asyncio
async def test_unknown_clients_share_one_bucket(clock: FakeClock) -> None:
    app = create_app(make_settings(rate_limit_requests=2), clock=clock)

    await enforce_rate_limit(_request(app, None))
    await enforce_rate_limit(_request(app, None))
    with pytest.raises(RateLimitAppError) as exc_info:
        await enforce_rate_limit(_request(app, None))

    assert exc_info.value.headers["Retry-After"] == "60"
    assert len(app.state.rate_limiter) == 1


def test_apps_do_not_share_limiter_state(clock: FakeClock, auth_headers: dict[str, Any]) -> None:
    first = TestClient(create_app(make_settings(rate_limit_requests=1), clock=clock))
    second = TestClient(create_app(make_settings(rate_limit_requests=1), clock=clock))

    assert first.get("/api/contacts", headers=auth_headers).status_code == 200
    assert first.get("/api/contacts", headers=auth_headers).status_code == 429
    assert second.get("/api/contacts", headers=auth_headers).status_code == 200
