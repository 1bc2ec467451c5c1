from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from finix.core.modules.auth.models import AuthCompletion, AuthInitiation, AuthStatus
from finix.core.modules.provider.models import ProviderHealth
from finix.web.deps import AppDep, UserIdDep
from finix.web.openapi import ErrorResponse

router = APIRouter(prefix="/auth/fi-mcp", tags=["auth"])


class InitiateRequest(BaseModel):
    """Start the Fi Money login handshake."""

    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber", max_length=32, description="Fi Money registered phone number")


class CompleteRequest(BaseModel):
    """Finish the Fi Money login handshake."""

    passcode: str = Field(..., max_length=16, description="6-digit passcode from the Fi Money app")


@router.get(
    "/status",
    summary="Get Fi Money connection status",
    description="Report whether the caller has an authenticated Fi MCP session.",
    operation_id="getAuthStatus",
    responses={
        200: {"description": "Connection status"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def get_status(app: AppDep, user_id: UserIdDep) -> AuthStatus:
    return await app.get_auth_status(user_id)


@router.post(
    "/initiate",
    summary="Start Fi Money login",
    description="Validate the phone number and create a pending session. Any previous session is discarded.",
    operation_id="initiateAuthentication",
    responses={
        200: {"description": "Login link and instructions"},
        400: {"model": ErrorResponse, "description": "Invalid phone number"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def initiate(request: InitiateRequest, app: AppDep, user_id: UserIdDep) -> AuthInitiation:
    return await app.initiate_authentication(user_id, request.phone_number)


@router.post(
    "/complete",
    summary="Complete Fi Money login",
    description="Verify the passcode with Fi Money and activate the pending session.",
    operation_id="completeAuthentication",
    responses={
        200: {"description": "Account connected"},
        400: {"model": ErrorResponse, "description": "Malformed or rejected passcode"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
        409: {"model": ErrorResponse, "description": "No pending session"},
        410: {"model": ErrorResponse, "description": "Pending session expired"},
        502: {"model": ErrorResponse, "description": "Provider error"},
        503: {"model": ErrorResponse, "description": "Provider unavailable"},
    },
)
async def complete(request: CompleteRequest, app: AppDep, user_id: UserIdDep) -> AuthCompletion:
    return await app.complete_authentication(user_id, request.passcode)


@router.post(
    "/disconnect",
    summary="Disconnect Fi Money",
    description="Drop the caller's Fi MCP session, whatever its state.",
    operation_id="disconnect",
    status_code=204,
    responses={
        204: {"description": "Disconnected"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def disconnect(app: AppDep, user_id: UserIdDep) -> None:
    await app.disconnect(user_id)


@router.get(
    "/mcp-status",
    summary="Check Fi MCP server",
    description="Probe the Fi MCP server health endpoint.",
    operation_id="getProviderHealth",
    responses={
        200: {"description": "Provider health"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def get_provider_health(app: AppDep, user_id: UserIdDep) -> ProviderHealth:  # noqa: ARG001
    return await app.get_provider_health()
