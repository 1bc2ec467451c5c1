import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from finix.errors import (
    AuthenticationRequiredError,
    ChatUnavailableError,
    IdentityError,
    NoPendingSessionError,
    RemoteError,
    RemoteUnavailableError,
    SessionExpiredError,
    UnknownFunctionError,
    UserError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific classes first
STATUS_CODES: list[tuple[type[UserError], int]] = [
    (IdentityError, 401),
    (AuthenticationRequiredError, 401),
    (NoPendingSessionError, 409),
    (SessionExpiredError, 410),
    (UnknownFunctionError, 404),
    (RemoteUnavailableError, 503),
    (ChatUnavailableError, 503),
    (RemoteError, 502),
    (ValidationError, 400),
]


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    status_code = next((code for cls, code in STATUS_CODES if isinstance(exc, cls)), 400)
    error_type = exc.error_type if isinstance(exc, UserError) else "bad_request"
    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
