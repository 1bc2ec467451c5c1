from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One prior turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ChatReply(BaseModel):
    message: str
    function_calls: list[str] = Field(default_factory=list, description="Tools executed for this reply, in order")
    data: dict[str, Any] | None = Field(None, description="Payloads of the successful tool calls by tool name")
    requires_auth: bool = Field(False, description="A tool call needs the user to connect Fi Money first")


class ChatStatus(BaseModel):
    available: bool
    authenticated: bool
    requires_auth: bool
    capabilities: list[str]
    message: str
