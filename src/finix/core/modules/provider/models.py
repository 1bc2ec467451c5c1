"""Provider request envelope and typed call outcomes."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class ProviderRequest(BaseModel):
    """JSON-RPC 2.0 envelope sent to the provider's streaming endpoint."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class ProviderSuccess(BaseModel):
    kind: Literal["success"] = "success"
    payload: Any = None


class ProviderUnauthorized(BaseModel):
    """The provider rejected the session or credential (HTTP 401/403 or equivalent)."""

    kind: Literal["unauthorized"] = "unauthorized"
    status: int | None = None
    message: str = "Unauthorized"


class ProviderUnavailable(BaseModel):
    """Timeout, connection failure or gateway error; safe to retry."""

    kind: Literal["unavailable"] = "unavailable"
    message: str


class ProviderFailure(BaseModel):
    """Any other provider error, carrying the provider's message."""

    kind: Literal["failure"] = "failure"
    status: int | None = None
    message: str


ProviderOutcome = Annotated[
    ProviderSuccess | ProviderUnauthorized | ProviderUnavailable | ProviderFailure,
    Field(discriminator="kind"),
]


class ProviderHealth(BaseModel):
    connected: bool
    status: int | None = None
    data: Any = None
    error: str | None = None
