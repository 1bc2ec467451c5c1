from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from finix.config import Config
from finix.core.core import Core
from finix.core.modules.auth.models import AuthCompletion, AuthInitiation, AuthStatus
from finix.core.modules.chat.models import ChatMessage, ChatReply, ChatStatus
from finix.core.modules.provider.models import ProviderHealth
from finix.core.modules.provider.transport import ProviderTransport
from finix.core.modules.tools.declarations import get_function_declarations
from finix.core.modules.tools.models import FunctionDeclaration, ToolResult
from finix.utils import Clock, now


class App:
    """Facade for all application operations, keyed by the verified caller's user id."""

    def __init__(self, config: Config, transport: ProviderTransport | None = None, clock: Clock = now) -> None:
        self._core = Core(config, transport=transport, clock=clock)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def get_auth_status(self, user_id: str) -> AuthStatus:
        return await self._core.services.auth.status(user_id)

    async def initiate_authentication(self, user_id: str, phone_number: str) -> AuthInitiation:
        """Start the Fi Money login handshake."""
        return await self._core.services.auth.initiate(user_id, phone_number)

    async def complete_authentication(self, user_id: str, passcode: str) -> AuthCompletion:
        """Finish the handshake with the passcode from the Fi Money app."""
        return await self._core.services.auth.complete(user_id, passcode)

    async def disconnect(self, user_id: str) -> None:
        await self._core.services.auth.disconnect(user_id)

    async def get_provider_health(self) -> ProviderHealth:
        """Probe the Fi MCP server."""
        return await self._core.transport.health(self._core.config.provider_health_url)

    async def send_chat_message(self, user_id: str, message: str, history: list[ChatMessage]) -> ChatReply:
        return await self._core.services.chat.process_message(user_id, message, history)

    async def get_chat_status(self, user_id: str) -> ChatStatus:
        return await self._core.services.chat.status(user_id)

    async def get_chat_suggestions(self, user_id: str) -> list[str]:
        return await self._core.services.chat.suggestions(user_id)

    def get_function_declarations(self) -> list[FunctionDeclaration]:
        return get_function_declarations()

    async def call_tool(self, user_id: str, name: str, args: dict[str, Any]) -> ToolResult:
        """Execute a single function call exactly as the assistant would."""
        return await self._core.services.tools.dispatch(user_id, name, args)

    def get_version(self) -> dict[str, str]:
        """Get version information."""
        try:
            package_version = version("finix")
        except PackageNotFoundError:
            package_version = "unknown"
        return {
            "version": package_version,
            "git_commit_hash": self._core.config.git_commit_hash,
            "git_commit_date": self._core.config.git_commit_date,
            "build_time": self._core.config.build_time,
        }
