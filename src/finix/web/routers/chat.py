from fastapi import APIRouter
from pydantic import BaseModel, Field

from finix.core.modules.chat.models import ChatMessage, ChatReply, ChatStatus
from finix.web.deps import AppDep, UserIdDep
from finix.web.openapi import ErrorResponse

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000, description="User message")
    history: list[ChatMessage] = Field(default_factory=list, max_length=50, description="Previous turns, oldest first")


@router.post(
    "",
    summary="Send chat message",
    description="Send a message to the assistant. The assistant fetches Fi Money data when the account is connected.",
    operation_id="sendChatMessage",
    responses={
        200: {"description": "Assistant reply"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
        503: {"model": ErrorResponse, "description": "Assistant unavailable"},
    },
)
async def send_message(request: ChatRequest, app: AppDep, user_id: UserIdDep) -> ChatReply:
    return await app.send_chat_message(user_id, request.message.strip(), request.history)


@router.get(
    "/status",
    summary="Get chat status",
    description="Chat availability and capabilities for the caller.",
    operation_id="getChatStatus",
    responses={
        200: {"description": "Chat status"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def get_status(app: AppDep, user_id: UserIdDep) -> ChatStatus:
    return await app.get_chat_status(user_id)


@router.get(
    "/suggestions",
    summary="Get message suggestions",
    description="Suggested prompts depending on whether Fi Money is connected.",
    operation_id="getChatSuggestions",
    responses={
        200: {"description": "Suggested prompts"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def get_suggestions(app: AppDep, user_id: UserIdDep) -> list[str]:
    return await app.get_chat_suggestions(user_id)
