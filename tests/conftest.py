"""Shared pytest fixtures."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from finix.config import Config
from finix.core.core import Core
from finix.core.modules.provider.models import ProviderHealth, ProviderOutcome, ProviderSuccess
from finix.core.modules.session.store import SessionStore

VERIFY_METHOD = "auth/verify"
TOOLS_CALL_METHOD = "tools/call"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class FakeTransport:
    """Provider transport spy with scripted outcomes.

    Passcode verification succeeds with a provider credential and every data
    tool returns a small payload unless overridden in `tool_outcomes`.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.verify_outcome: ProviderOutcome = ProviderSuccess(payload={"credential": "provider-token"})
        self.tool_outcomes: dict[str, ProviderOutcome] = {}
        self.on_call: Callable[[str, dict[str, Any]], Awaitable[None]] | None = None
        self.closed = False

    async def call(
        self, method: str, params: dict[str, Any], session_id: str, credential: str | None = None
    ) -> ProviderOutcome:
        self.calls.append({"method": method, "params": params, "session_id": session_id, "credential": credential})
        if self.on_call is not None:
            await self.on_call(method, params)
        if method == VERIFY_METHOD:
            return self.verify_outcome
        name = params["name"]
        return self.tool_outcomes.get(name, ProviderSuccess(payload={"tool": name, "value": 100}))

    @property
    def data_calls(self) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["method"] == TOOLS_CALL_METHOD]

    async def health(self, url: str) -> ProviderHealth:
        return ProviderHealth(connected=True, status=200, data={"url": url})

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    return Config(
        host="127.0.0.1",
        port=8000,
        debug=True,
        llm_api_key="test-key",
        llm_model="test/model",
        pending_window=300,
        authenticated_window=1800,
        sweep_interval=300,
    )


@pytest.fixture
def store(clock):
    return SessionStore(timedelta(minutes=5), timedelta(minutes=30), clock=clock)


@pytest.fixture
def core(config, transport, clock):
    """Core wired to the fake transport and clock (services not started)."""
    return Core(config, transport=transport, clock=clock)


@pytest.fixture
def authenticate(core):
    """Run the full handshake for a user."""

    async def _authenticate(user_id: str, phone_number: str = "+14155550100") -> None:
        await core.services.auth.initiate(user_id, phone_number)
        await core.services.auth.complete(user_id, "000000")

    return _authenticate
