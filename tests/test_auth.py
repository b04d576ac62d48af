"""Unit tests for API key authentication module."""

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from app.core.auth import ANONYMOUS_ACTOR, fingerprint, parse_api_keys, validate_api_key, verify_api_key
from app.core.errors import AuthenticationAppError


class TestParseAPIKeys:
    """Test API key parsing utility function."""

    def test_parse_multiple_keys_with_whitespace(self) -> None:
        assert parse_api_keys("key1 , key2  ,  key3") == {"key1", "key2", "key3"}

    def test_parse_none_or_blank_returns_empty_set(self) -> None:
        assert parse_api_keys(None) == set()
        assert parse_api_keys("") == set()
        assert parse_api_keys("   ,  ,  ") == set()

    def test_parse_removes_duplicate_keys(self) -> None:
        assert parse_api_keys("key1,key2,key1") == {"key1", "key2"}


def test_fingerprint_is_stable_and_short() -> None:
    assert fingerprint("secret") == fingerprint("secret")
    assert len(fingerprint("secret")) == 16
    assert "secret" not in fingerprint("secret")


class TestValidateAPIKey:
    """Test core API key validation logic."""

    @patch("app.core.auth.settings")
    def test_validate_bypassed_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False

        validate_api_key("any-random-key")
        validate_api_key("")

    @patch("app.core.auth.settings")
    def test_validate_raises_when_no_keys_configured(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = None

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key("some-key")

        assert exc_info.value.code == "api_keys_not_configured"

    @patch("app.core.auth.settings")
    def test_validate_accepts_valid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "valid-key-1,valid-key-2"

        validate_api_key("valid-key-1")
        validate_api_key("valid-key-2")

    @patch("app.core.auth.settings")
    def test_validate_rejects_untrimmed_or_unknown_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = " key1 , key2 "

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key(" key1 ")
        assert exc_info.value.code == "invalid_api_key"

        with pytest.raises(AuthenticationAppError):
            validate_api_key("key3")


class TestVerifyAPIKeyDependency:
    """Test FastAPI dependency for API key verification."""

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_returns_anonymous_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False

        assert await verify_api_key(x_api_key=None) == ANONYMOUS_ACTOR
        assert await verify_api_key(x_api_key="k") == fingerprint("k")

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_raises_403_when_header_missing(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "valid-key"

        with pytest.raises(HTTPException) as exc_info:
            await verify_api_key(x_api_key=None)

        assert exc_info.value.status_code == 403
        assert "Missing API key" in exc_info.value.detail

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_raises_403_when_key_invalid(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "valid-key"

        with pytest.raises(HTTPException) as exc_info:
            await verify_api_key(x_api_key="wrong-key")

        assert exc_info.value.status_code == 403
        assert "Invalid or missing API key" in exc_info.value.detail

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_returns_key_fingerprint_for_valid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "my-valid-key,another-key"

        assert await verify_api_key(x_api_key="my-valid-key") == fingerprint("my-valid-key")
