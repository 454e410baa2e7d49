"""Tests for the app factory and the lifespan-owned background sweeps."""

from fastapi.testclient import TestClient

from admin_api.core.app_factory import build_sweepers, create_app
from conftest import FakeClock, make_settings


def test_sweepers_run_for_app_lifetime(clock: FakeClock) -> None:
    app = create_app(make_settings(), clock=clock)

    with TestClient(app):
        sweepers = app.state.sweepers
        assert [s.name for s in sweepers] == ["response_cache.sweep", "rate_limit.sweep"]
        assert all(s.running for s in sweepers)

    assert not any(s.running for s in sweepers)


def test_disabled_components_get_no_sweeper(clock: FakeClock) -> None:
    app = create_app(
        make_settings(cache={"enabled": False}, rate_limit_enabled=False),
        clock=clock,
    )

    assert build_sweepers(app) == []


def test_sweep_intervals_come_from_settings(clock: FakeClock) -> None:
    app = create_app(
        make_settings(
            cache={"sweep_interval_seconds": 5},
            rate_limit_sweep_interval_seconds=7,
        ),
        clock=clock,
    )

    intervals = {s.name: s.interval_seconds for s in build_sweepers(app)}

    assert intervals == {"response_cache.sweep": 5, "rate_limit.sweep": 7}


def test_apps_own_independent_caches(clock: FakeClock, auth_headers) -> None:
    first_app = create_app(make_settings(), clock=clock)
    second_app = create_app(make_settings(), clock=clock)

    TestClient(first_app).get("/api/contacts", headers=auth_headers)

    assert first_app.state.response_cache is not second_app.state.response_cache
    assert "/api/contacts" in first_app.state.response_cache
    assert len(second_app.state.response_cache) == 0


def test_openapi_documents_bearer_auth_and_cache_headers(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    assert "BearerAuth" in schema["components"]["securitySchemes"]
    assert schema["paths"]["/health"]["get"]["security"] == []

    orders_get = schema["paths"]["/api/orders"]["get"]
    assert "429" in orders_get["responses"]
    assert "X-Cache" in orders_get["responses"]["200"]["headers"]
