"""Document store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

Document = dict[str, Any]

ASCENDING = 1
DESCENDING = -1

SortSpec = Sequence[tuple[str, int]]


class AbstractDocumentStore(ABC):
    """Collections of JSON documents addressed by an ``_id`` string."""

    @abstractmethod
    async def list(
        self,
        collection: str,
        *,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Return documents of a collection.

        Args:
            collection: Collection name (e.g., "orders").
            sort: ``(field, ASCENDING|DESCENDING)`` pairs, most significant first.
            limit: Maximum number of documents returned.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Document | None:
        """Return one document, or None if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, collection: str, document: Document) -> Document:
        """Insert a document and return it with ``_id`` and timestamps set."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, collection: str, document_id: str, changes: Document) -> Document | None:
        """Apply ``changes`` to a document; return the updated document or None."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> Document | None:
        """Delete a document; return the deleted document or None."""
        raise NotImplementedError
