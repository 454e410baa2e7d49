"""Bearer token authentication for the admin API.

Tokens are validated against a comma-separated list from the application
settings (``APP_AUTH_TOKENS``). Verification of real identity tokens lives
outside this service; this module only guards the HTTP boundary.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Header, Request

from admin_api.core.config import AppSettings
from admin_api.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def parse_tokens(tokens_string: str | None) -> set[str]:
    """Parse comma-separated tokens into a set.

    Examples:
        >>> parse_tokens("t1, t2 ,t3")
        {'t1', 't2', 't3'}
        >>> parse_tokens(None)
        set()
    """
    if not tokens_string:
        return set()
    return {token.strip() for token in tokens_string.split(",") if token.strip()}


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token part of an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def _token_hash(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def validate_token(provided_token: str | None, app_settings: AppSettings) -> None:
    """Validate a bearer token against the configured tokens.

    Args:
        provided_token: Token extracted from the request, or None.
        app_settings: Settings holding ``auth_required`` and ``auth_tokens``.

    Raises:
        AuthenticationAppError: If the token is missing, unknown, or no tokens
            are configured while authentication is required.
    """
    if not app_settings.auth_required:
        return

    valid_tokens = parse_tokens(app_settings.auth_tokens)
    if not valid_tokens:
        logger.error(
            "auth.failed",
            extra={"reason": "tokens_not_configured"},
        )
        raise AuthenticationAppError(
            code="auth_not_configured",
            message="Authentication is enabled but no tokens are configured",
            details={"hint": "Set APP_AUTH_TOKENS or disable auth with APP_AUTH_REQUIRED=false"},
        )

    if not provided_token:
        logger.warning("auth.failed", extra={"reason": "missing_token"})
        raise AuthenticationAppError(
            code="missing_token",
            message="Missing bearer token. Provide an Authorization: Bearer header.",
        )

    if provided_token not in valid_tokens:
        logger.warning(
            "auth.failed",
            extra={"reason": "invalid_token", "token_hash": _token_hash(provided_token)},
        )
        raise AuthenticationAppError(
            code="invalid_token",
            message="Invalid or expired token",
        )


async def verify_bearer_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """FastAPI dependency guarding the ``/api`` router.

    Usage:
        APIRouter(dependencies=[Depends(verify_bearer_token)])

    Raises:
        AuthenticationAppError: Rendered as 401 by the exception handlers.
    """
    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.auth_required:
        logger.debug("auth.skipped", extra={"reason": "auth_required_false"})
        return

    validate_token(extract_bearer_token(authorization), app_settings)
