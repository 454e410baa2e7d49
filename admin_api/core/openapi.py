"""OpenAPI customization for the admin API.

Adds the bearer security scheme, tag descriptions, and documents the cache
and throttling headers on the operations that emit them.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from admin_api.core.response_cache import CACHE_STATUS_HEADER

TAGS_METADATA = [
    {"name": "Orders", "description": "Order listings and status changes."},
    {"name": "Products", "description": "Product catalogue administration."},
    {"name": "Staff", "description": "Tasks, employees and expenses."},
    {"name": "Directory", "description": "Contacts, customer accounts and notifications."},
    {"name": "Health", "description": "Liveness checks."},
]

_CACHE_HEADERS = {
    CACHE_STATUS_HEADER: {
        "description": "HIT when served from the response cache, MISS otherwise.",
        "schema": {"type": "string", "enum": ["HIT", "MISS"]},
    },
    "Cache-Control": {
        "description": "private, max-age=<route TTL in seconds>",
        "schema": {"type": "string"},
    },
}

_THROTTLED_RESPONSE = {
    "description": "Too many requests from this client within the rate limit window.",
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add security and header docs.

    - Injects a bearer security scheme required by every ``/api`` operation
    - Exempts ``/health`` by setting ``security: []``
    - Documents X-Cache/Cache-Control on GET operations and 429 on ``/api``
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()
        cached_paths = {
            route.path
            for route in app.routes
            if getattr(getattr(route, "endpoint", None), "cache_ttl_seconds", None)
        }

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Provide an admin token via Authorization: Bearer <token>.",
            },
        )
        schema.setdefault("security", [{"BearerAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            for method, operation in methods.items():
                if not isinstance(operation, dict):
                    continue
                if path.endswith("/health"):
                    operation["security"] = []
                    continue
                responses = operation.setdefault("responses", {})
                responses.setdefault("429", _THROTTLED_RESPONSE)
                # File downloads are never cached
                if (
                    method == "get"
                    and "200" in responses
                    and path in cached_paths
                    and "/export" not in path
                ):
                    responses["200"].setdefault("headers", {}).update(_CACHE_HEADERS)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
