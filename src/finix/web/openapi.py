from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="FiNIX API",
            version="0.1.0",
            summary="AI financial assistant backed by the Fi Money MCP server",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "UserIdHeader": {
                "type": "apiKey",
                "in": "header",
                "name": "X-User-Id",
                "description": "Verified user id forwarded by the identity-aware proxy",
            },
        }
        openapi_schema["security"] = [{"UserIdHeader": []}]

        # Remove security from public endpoints
        public_endpoints = {
            ("GET", "/health"),
            ("GET", "/metadata/version"),
            ("GET", "/api/v1/tools"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Passcode must be a 6-digit number", "type": "invalid_passcode"},
                {"message": "Authentication session expired. Please start again.", "type": "session_expired"},
                {"message": "User identity required", "type": "identity_error"},
            ]
        }
    }
