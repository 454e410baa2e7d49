"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``admin_api`` import so the
module-level settings never pick up a developer's .env file values.
"""

import asyncio
import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_AUTH_REQUIRED", "true")
os.environ.setdefault("APP_AUTH_TOKENS", "test-token-123,test-token-456")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from admin_api.adapters.store.in_memory import InMemoryDocumentStore
from admin_api.core.app_factory import create_app
from admin_api.core.config import AppSettings, CacheSettings, LogSettings, Settings

TEST_TOKEN = "test-token-123"


class FakeClock:
    """Deterministic clock used to test expiration and window logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(*, cache: dict[str, Any] | None = None, **app_overrides: Any) -> Settings:
    """Build isolated settings; keyword arguments override AppSettings fields."""
    app_values: dict[str, Any] = {
        "auth_required": True,
        "auth_tokens": TEST_TOKEN,
        "rate_limit_requests": 1000,
        "rate_limit_window_seconds": 60,
    }
    app_values.update(app_overrides)
    return Settings(
        log=LogSettings(level="WARNING"),
        app=AppSettings(**app_values),
        cache=CacheSettings(**(cache or {})),
    )


def seed(store: InMemoryDocumentStore, collection: str, *documents: dict[str, Any]) -> list[dict[str, Any]]:
    """Insert documents synchronously (test setup only)."""
    return [asyncio.run(store.insert(collection, doc)) for doc in documents]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def make_client(clock: FakeClock, store: InMemoryDocumentStore) -> Callable[..., TestClient]:
    """Factory building a TestClient around a freshly created app."""

    def _make(**settings_overrides: Any) -> TestClient:
        app = create_app(make_settings(**settings_overrides), store=store, clock=clock)
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()
