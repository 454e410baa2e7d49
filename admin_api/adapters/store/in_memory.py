"""In-memory document store.

Documents are deep-copied on the way in and out, so callers can never
mutate stored state through a returned object.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from admin_api.adapters.store.base import DESCENDING, AbstractDocumentStore, Document, SortSpec


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_value(value: Any) -> tuple[bool, Any]:
    # Missing fields sort last in ascending order.
    return (value is None, value)


class InMemoryDocumentStore(AbstractDocumentStore):
    """Dict-of-dicts store keyed by collection and ``_id``."""

    def __init__(self, *, now: Callable[[], str] = _utc_now_iso) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._now = now

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    async def list(
        self,
        collection: str,
        *,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        documents = list(self._collection(collection).values())
        # Stable sorts applied from least to most significant field.
        for field, direction in reversed(list(sort or ())):
            documents.sort(
                key=lambda doc, f=field: _sort_value(doc.get(f)),
                reverse=direction == DESCENDING,
            )
        if limit is not None:
            documents = documents[:limit]
        return copy.deepcopy(documents)

    async def get(self, collection: str, document_id: str) -> Document | None:
        document = self._collection(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def insert(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", uuid.uuid4().hex)
        timestamp = self._now()
        stored.setdefault("createdAt", timestamp)
        stored["updatedAt"] = timestamp
        self._collection(collection)[stored["_id"]] = stored
        return copy.deepcopy(stored)

    async def update(self, collection: str, document_id: str, changes: Document) -> Document | None:
        documents = self._collection(collection)
        current = documents.get(document_id)
        if current is None:
            return None
        updated = {**current, **copy.deepcopy(changes), "_id": document_id}
        updated["updatedAt"] = self._now()
        documents[document_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, collection: str, document_id: str) -> Document | None:
        document = self._collection(collection).pop(document_id, None)
        return copy.deepcopy(document) if document is not None else None
