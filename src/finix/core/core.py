from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, cast

from finix.config import Config
from finix.utils import Clock, now

if TYPE_CHECKING:
    from finix.core.modules.provider.transport import ProviderTransport


class Service:
    """Base class for services sharing the application config and clock."""

    def __init__(self, config: Config, clock: Clock) -> None:
        self.config = config
        self.clock = clock
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from finix.core.modules.auth.service import AuthFlowService  # noqa: PLC0415
    from finix.core.modules.chat.service import ChatService  # noqa: PLC0415
    from finix.core.modules.session.service import SessionService  # noqa: PLC0415
    from finix.core.modules.tools.service import ToolDispatcherService  # noqa: PLC0415

    session: SessionService
    auth: AuthFlowService
    tools: ToolDispatcherService
    chat: ChatService

    def __init__(self, config: Config, clock: Clock) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for startup - session must be first so the sweeper runs before traffic
        service_configs = [
            ("session", "finix.core.modules.session.service", "SessionService"),
            ("auth", "finix.core.modules.auth.service", "AuthFlowService"),
            ("tools", "finix.core.modules.tools.service", "ToolDispatcherService"),
            ("chat", "finix.core.modules.chat.service", "ChatService"),
        ]

        # Dynamically import and instantiate services
        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(config, clock)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop services in reverse start order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, provider transport, and all service instances."""

    config: Config
    transport: ProviderTransport
    services: Services

    def __init__(self, config: Config, transport: ProviderTransport | None = None, clock: Clock = now) -> None:
        """Initialize core with config and provider transport, and auto-register services."""
        from finix.core.modules.provider.transport import HttpProviderTransport  # noqa: PLC0415

        self.config = config
        self.transport = transport or HttpProviderTransport(config.provider_url, config.provider_timeout)
        self.services = Services(config, clock)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close the provider transport on shutdown."""
        await self.services.stop_all()
        await self.transport.aclose()
