import asyncio
import json
import time
from typing import Any

import litellm
import structlog

from finix.core.core import Service
from finix.core.modules.chat.models import ChatMessage, ChatReply, ChatStatus
from finix.core.modules.chat.prompts import (
    ANONYMOUS_SUGGESTIONS,
    AUTHENTICATED_SUGGESTIONS,
    CAPABILITIES,
    build_system_prompt,
)
from finix.core.modules.tools.declarations import get_function_declarations
from finix.core.modules.tools.models import ToolError, ToolResult
from finix.errors import ChatUnavailableError

logger = structlog.get_logger(__name__)


def _assistant_message(content: str | None, tool_calls: list[Any]) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": content,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in tool_calls
        ],
    }


def _tool_message(call_id: str, result: ToolResult) -> dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": call_id,
        "name": result.name,
        "content": result.model_dump_json(exclude={"name"}),
    }


class ChatService(Service):
    """Runs a chat turn: model, requested tool calls, model again."""

    async def _complete(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None) -> Any:
        if not self.config.llm_api_key:
            raise ChatUnavailableError("LLM API key not configured")

        start_time = time.time()
        try:
            response = await litellm.acompletion(
                model=self.config.llm_model,
                messages=messages,
                tools=tools,
                api_key=self.config.llm_api_key,
                temperature=self.config.llm_temperature,
                max_tokens=self.config.llm_max_tokens,
            )
        except Exception as e:
            logger.exception("llm_completion_failed", model=self.config.llm_model, error=str(e))
            raise ChatUnavailableError("The assistant is temporarily unavailable. Please try again.") from e

        usage = getattr(response, "usage", None)
        logger.debug(
            "llm_completion",
            model=self.config.llm_model,
            duration_ms=int((time.time() - start_time) * 1000),
            total_tokens=getattr(usage, "total_tokens", None),
        )
        return response.choices[0].message

    async def _run_tool_call(self, user_id: str, call: Any) -> ToolResult:
        name = call.function.name
        try:
            args = json.loads(call.function.arguments or "{}")
        except json.JSONDecodeError:
            args = None
        if not isinstance(args, dict):
            return ToolResult(
                name=name,
                ok=False,
                error=ToolError(type="invalid_input", message="Function arguments must be a JSON object"),
            )
        return await self.core.services.tools.dispatch(user_id, name, args)

    async def process_message(self, user_id: str, message: str, history: list[ChatMessage] | None = None) -> ChatReply:
        """Answer a user message, executing any function calls the model requests."""
        history = history or []
        logger.info("chat_message", user_id=user_id, message_length=len(message), history_length=len(history))

        authenticated = await self.core.services.session.store.is_authenticated(user_id)
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": build_system_prompt(user_id, authenticated)},
            *({"role": turn.role, "content": turn.content} for turn in history),
            {"role": "user", "content": message},
        ]
        tools = [declaration.to_openai_tool() for declaration in get_function_declarations()]
        results: list[ToolResult] = []

        for _ in range(self.config.max_tool_rounds):
            reply = await self._complete(messages, tools)
            tool_calls = list(getattr(reply, "tool_calls", None) or [])
            if not tool_calls:
                return self._build_reply(user_id, reply.content, results)

            messages.append(_assistant_message(reply.content, tool_calls))
            round_results = await asyncio.gather(*(self._run_tool_call(user_id, call) for call in tool_calls))
            for call, result in zip(tool_calls, round_results, strict=True):
                messages.append(_tool_message(call.id, result))
                results.append(result)

        # Out of tool rounds: ask for a plain answer from what was gathered
        reply = await self._complete(messages, None)
        return self._build_reply(user_id, reply.content, results)

    def _build_reply(self, user_id: str, content: str | None, results: list[ToolResult]) -> ChatReply:
        data = {result.name: result.data for result in results if result.ok}
        reply = ChatReply(
            message=content or "",
            function_calls=[result.name for result in results],
            data=data or None,
            requires_auth=any(result.error is not None and result.error.requires_auth for result in results),
        )
        logger.info(
            "chat_response",
            user_id=user_id,
            function_calls=reply.function_calls,
            response_length=len(reply.message),
            requires_auth=reply.requires_auth,
        )
        return reply

    async def suggestions(self, user_id: str) -> list[str]:
        if await self.core.services.session.store.is_authenticated(user_id):
            return list(AUTHENTICATED_SUGGESTIONS)
        return list(ANONYMOUS_SUGGESTIONS)

    async def status(self, user_id: str) -> ChatStatus:
        authenticated = await self.core.services.session.store.is_authenticated(user_id)
        return ChatStatus(
            available=bool(self.config.llm_api_key),
            authenticated=authenticated,
            requires_auth=not authenticated,
            capabilities=list(CAPABILITIES),
            message="Fi MCP connection is active" if authenticated else "Fi MCP authentication required",
        )
