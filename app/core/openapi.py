"""OpenAPI customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- API Key security scheme (``X-API-Key``), exempting health endpoints
- The rate limit headers returned by throttled operations

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_TAGS = [
    {
        "name": "Beats",
        "description": "Beat (patrol area) management. PUT and DELETE are rate limited per client address.",
    },
    {
        "name": "Health",
        "description": "Liveness and readiness checks.",
    },
]

_RATE_LIMIT_HEADERS = {
    "X-RateLimit-Remaining": {
        "description": "Requests left in the current window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "When the current window resets (ISO-8601, UTC).",
        "schema": {"type": "string", "format": "date-time"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Provide your API key via the X-API-Key header.",
            },
        )
        schema.setdefault("security", [{"ApiKeyAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(tag for tag in _TAGS if tag["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            for method, operation in methods.items():
                if not isinstance(operation, dict):
                    continue
                if path.endswith("/health"):
                    operation["security"] = []
                elif method in ("put", "delete"):
                    responses = operation.setdefault("responses", {})
                    responses.setdefault("429", {"description": "Rate limit exceeded"})
                    for response in responses.values():
                        response.setdefault("headers", {}).update(_RATE_LIMIT_HEADERS)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
