from datetime import datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from finix.errors import UserError


class ToolKind(StrEnum):
    """Static classification of a tool."""

    AUTH_EXEMPT = "auth_exempt"  # callable without a provider session
    DATA = "data"  # requires an authenticated provider session


class ParameterSchema(BaseModel):
    """JSON-Schema-like description of a tool's arguments."""

    type: str = "object"
    properties: dict[str, dict[str, Any]]
    required: list[str]


class FunctionDeclaration(BaseModel):
    """Tool as advertised to the language model."""

    name: str
    description: str
    parameters: ParameterSchema

    def to_openai_tool(self) -> dict[str, Any]:
        return {"type": "function", "function": self.model_dump()}


class UserArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(None, alias="userId")


class InitiateArgs(UserArgs):
    phone_number: str = Field(..., alias="phoneNumber")


class CompleteArgs(UserArgs):
    passcode: str


class ToolError(BaseModel):
    type: str
    message: str
    retryable: bool = False
    requires_auth: bool = False

    @classmethod
    def from_error(cls, error: UserError) -> Self:
        return cls(
            type=error.error_type,
            message=str(error),
            retryable=error.retryable,
            requires_auth=error.requires_auth,
        )


class ToolResult(BaseModel):
    """Outcome of one dispatched call, fed back to the model."""

    name: str
    ok: bool
    data: Any = None
    error: ToolError | None = None


class PortfolioAnalysis(BaseModel):
    """Aggregate of independent data calls; individual failures are reported, not raised."""

    summary: dict[str, Any]
    available_data: dict[str, bool]
    outcomes: dict[str, ToolResult]
    last_updated: datetime
