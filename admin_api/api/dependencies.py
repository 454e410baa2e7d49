from __future__ import annotations

from fastapi import Request

from admin_api.adapters.store.base import AbstractDocumentStore


def get_store(request: Request) -> AbstractDocumentStore:
    """Return the document store owned by the application."""
    return request.app.state.store
