"""Application-level exception types.

Domain errors raised by routes, services and HTTP dependencies. The global
exception handlers map each type to an HTTP status and a consistent JSON
error body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    allowed_values: list[str]
    resource: str
    resource_id: str
    limit: int
    window_s: float
    retry_after: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails a business rule."""


class AuthenticationAppError(AppError):
    """Raised when the bearer token is missing or not accepted."""


class NotFoundAppError(AppError):
    """Raised when a document does not exist in its collection."""


@dataclass
class RateLimitAppError(AppError):
    """Raised when a client has exhausted its request quota.

    Attributes:
        headers: Extra response headers (Retry-After, X-RateLimit-*).
    """

    headers: dict[str, str] = field(default_factory=dict)
