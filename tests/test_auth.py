"""Unit tests for bearer token authentication module."""

import pytest
from starlette.requests import Request

from admin_api.core.app_factory import create_app
from admin_api.core.auth import extract_bearer_token, parse_tokens, validate_token, verify_bearer_token
from admin_api.core.config import AppSettings
from admin_api.core.errors import AuthenticationAppError
from conftest import make_settings


class TestParseTokens:
    """Test token parsing utility function."""

    def test_parse_single_token(self) -> None:
        assert parse_tokens("my-secret-token") == {"my-secret-token"}

    def test_parse_multiple_tokens(self) -> None:
        assert parse_tokens("t1,t2,t3") == {"t1", "t2", "t3"}

    def test_parse_tokens_with_whitespace(self) -> None:
        """Test that whitespace is trimmed from tokens."""
        assert parse_tokens("t1 , t2  ,  t3") == {"t1", "t2", "t3"}

    @pytest.mark.parametrize("raw", [None, "", "   ,  ,  "])
    def test_parse_empty_values_return_empty_set(self, raw: str | None) -> None:
        assert parse_tokens(raw) == set()

    def test_parse_removes_duplicates(self) -> None:
        assert parse_tokens("t1,t2,t1,t3,t2") == {"t1", "t2", "t3"}


class TestExtractBearerToken:
    def test_extracts_token(self) -> None:
        assert extract_bearer_token("Bearer abc") == "abc"

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_bearer_token("bearer abc") == "abc"
        assert extract_bearer_token("BEARER abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "Bearer ", "abc"])
    def test_returns_none_without_bearer_token(self, header: str | None) -> None:
        assert extract_bearer_token(header) is None


class TestValidateToken:
    """Test core token validation logic."""

    def test_bypassed_when_auth_disabled(self) -> None:
        """Test that validation is skipped when APP_AUTH_REQUIRED=false."""
        app_settings = AppSettings(auth_required=False, auth_tokens=None)

        # Should not raise even with an unknown token
        validate_token("any-random-token", app_settings)
        validate_token(None, app_settings)

    @pytest.mark.parametrize("tokens", [None, ""])
    def test_raises_when_no_tokens_configured(self, tokens: str | None) -> None:
        app_settings = AppSettings(auth_required=True, auth_tokens=tokens)

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_token("some-token", app_settings)

        assert exc_info.value.code == "auth_not_configured"
        assert "no tokens are configured" in exc_info.value.message

    def test_accepts_valid_token(self) -> None:
        app_settings = AppSettings(auth_required=True, auth_tokens="valid-1,valid-2")

        validate_token("valid-1", app_settings)
        validate_token("valid-2", app_settings)

    def test_rejects_invalid_token(self) -> None:
        app_settings = AppSettings(auth_required=True, auth_tokens="valid-1,valid-2")

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_token("invalid", app_settings)

        assert exc_info.value.code == "invalid_token"
        assert exc_info.value.message == "Invalid or expired token"

    def test_rejects_missing_token(self) -> None:
        app_settings = AppSettings(auth_required=True, auth_tokens="valid")

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_token(None, app_settings)

        assert exc_info.value.code == "missing_token"

    def test_configured_tokens_are_trimmed(self) -> None:
        app_settings = AppSettings(auth_required=True, auth_tokens=" t1 , t2 , t3 ")

        validate_token("t1", app_settings)
        validate_token("t2", app_settings)

        with pytest.raises(AuthenticationAppError):
            validate_token(" t1 ", app_settings)


class TestVerifyBearerTokenDependency:
    """Test the FastAPI dependency, which reads settings from the app."""

    @staticmethod
    def _request(**overrides) -> Request:
        app = create_app(make_settings(**overrides))
        return Request({"type": "http", "app": app, "headers": []})

    @pytest.mark.asyncio
    async def test_bypassed_when_auth_disabled(self) -> None:
        await verify_bearer_token(self._request(auth_required=False), authorization=None)

    @pytest.mark.asyncio
    async def test_missing_header_raises(self) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            await verify_bearer_token(self._request(), authorization=None)

        assert exc_info.value.code == "missing_token"

    @pytest.mark.asyncio
    async def test_invalid_token_raises(self) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            await verify_bearer_token(self._request(), authorization="Bearer wrong")

        assert exc_info.value.code == "invalid_token"

    @pytest.mark.asyncio
    async def test_accepts_valid_token(self) -> None:
        request = self._request(auth_tokens="my-valid-token,another-token")

        await verify_bearer_token(request, authorization="Bearer my-valid-token")
        await verify_bearer_token(request, authorization="bearer another-token")
