"""Tests for global exception handlers.

Validates that domain errors map to the right HTTP status codes, share one
error format, and that unexpected errors never leak internals.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    NotFoundAppError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers, status_for


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def handler_client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


@pytest.mark.parametrize(
    ("error", "expected_status"),
    [
        (ValidationAppError(code="v", message="bad"), 400),
        (AuthenticationAppError(code="a", message="denied"), 403),
        (NotFoundAppError(code="n", message="missing"), 404),
        (AppError(code="x", message="generic"), 400),
    ],
)
def test_status_mapping(error: AppError, expected_status: int) -> None:
    assert status_for(error) == expected_status


class TestAppErrorHandler:
    def test_not_found_returns_404_with_details(
        self, handler_client: TestClient, app_with_handlers: FastAPI
    ) -> None:
        @app_with_handlers.get("/test-not-found")
        async def endpoint():
            raise NotFoundAppError(code="beat_not_found", message="Beat not found", details={"beat_id": "b1"})

        response = handler_client.get("/test-not-found")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "beat_not_found"
        assert error["message"] == "Beat not found"
        assert error["details"] == {"beat_id": "b1"}
        assert "request_id" in error

    def test_details_omitted_when_absent(
        self, handler_client: TestClient, app_with_handlers: FastAPI
    ) -> None:
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="test", message="test")

        error = handler_client.get("/test-validation").json()["error"]

        assert "details" not in error
        assert set(error) == {"code", "message", "request_id"}


class TestGeneralExceptionHandler:
    def test_unexpected_error_is_generic_500(self) -> None:
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()


def test_setup_registers_handlers(app_with_handlers: FastAPI) -> None:
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
