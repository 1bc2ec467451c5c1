"""HTTP transport for the Fi MCP provider's streaming JSON-RPC endpoint."""

import asyncio
import itertools
import json
from typing import Any, Protocol

import httpx
import structlog

from finix.core.modules.provider.models import (
    ProviderFailure,
    ProviderHealth,
    ProviderOutcome,
    ProviderRequest,
    ProviderSuccess,
    ProviderUnauthorized,
    ProviderUnavailable,
)

logger = structlog.get_logger(__name__)

UNAUTHORIZED_HTTP_STATUSES = frozenset({401, 403})
UNAVAILABLE_HTTP_STATUSES = frozenset({502, 503, 504})
# JSON-RPC error codes the provider uses for a missing or rejected login
UNAUTHORIZED_RPC_CODES = frozenset({401, 403, -32001})


class ProviderTransport(Protocol):
    """Anything able to carry a JSON-RPC call to the provider."""

    async def call(
        self, method: str, params: dict[str, Any], session_id: str, credential: str | None = None
    ) -> ProviderOutcome: ...

    async def health(self, url: str) -> ProviderHealth: ...

    async def aclose(self) -> None: ...


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, or the last data frame of an event-stream body."""
    if response.headers.get("content-type", "").startswith("text/event-stream"):
        frames = [line[5:].strip() for line in response.text.splitlines() if line.startswith("data:")]
        if not frames:
            raise ValueError("Empty event stream")
        return json.loads(frames[-1])
    return response.json()


def _error_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return default


def interpret_response(response: httpx.Response) -> ProviderOutcome:
    """Map an HTTP response from the provider onto a typed outcome."""
    try:
        body = _decode_body(response)
    except ValueError:
        body = None

    status = response.status_code
    if status in UNAUTHORIZED_HTTP_STATUSES:
        return ProviderUnauthorized(status=status, message=_error_message(body, "Unauthorized"))
    if status in UNAVAILABLE_HTTP_STATUSES:
        return ProviderUnavailable(message=_error_message(body, f"Provider returned HTTP {status}"))
    if status >= 400:
        return ProviderFailure(status=status, message=_error_message(body, f"Provider returned HTTP {status}"))

    if not isinstance(body, dict):
        return ProviderFailure(status=status, message="Provider returned a malformed response")

    error = body.get("error")
    if error:
        code = error.get("code") if isinstance(error, dict) else None
        message = _error_message(body, "Provider call failed")
        if code in UNAUTHORIZED_RPC_CODES:
            return ProviderUnauthorized(status=code, message=message)
        return ProviderFailure(status=code, message=message)

    return ProviderSuccess(payload=body.get("result"))


class HttpProviderTransport:
    """Posts JSON-RPC envelopes to a single endpoint with an end-to-end timeout."""

    def __init__(self, url: str, timeout: float, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._ids = itertools.count(1)

    async def call(
        self, method: str, params: dict[str, Any], session_id: str, credential: str | None = None
    ) -> ProviderOutcome:
        request = ProviderRequest(id=next(self._ids), method=method, params=params)
        headers = {"Content-Type": "application/json", "Mcp-Session-Id": session_id}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"

        try:
            async with asyncio.timeout(self.timeout):
                response = await self._client.post(self.url, json=request.model_dump(), headers=headers)
        except (TimeoutError, httpx.TimeoutException):
            logger.warning("provider_call_timeout", method=method, session_id=session_id, timeout=self.timeout)
            return ProviderUnavailable(message=f"Provider did not respond within {self.timeout:g}s")
        except httpx.TransportError as e:
            logger.warning("provider_call_unreachable", method=method, session_id=session_id, error=str(e))
            return ProviderUnavailable(message=f"Provider connection failed: {e}")

        outcome = interpret_response(response)
        logger.debug(
            "provider_call_finished",
            method=method,
            session_id=session_id,
            http_status=response.status_code,
            outcome=outcome.kind,
        )
        return outcome

    async def health(self, url: str) -> ProviderHealth:
        """Probe the provider's health endpoint."""
        try:
            async with asyncio.timeout(self.timeout):
                response = await self._client.get(url)
        except (TimeoutError, httpx.HTTPError) as e:
            logger.warning("provider_health_failed", url=url, error=str(e) or type(e).__name__)
            return ProviderHealth(connected=False, error=str(e) or type(e).__name__)

        try:
            data: Any = response.json()
        except ValueError:
            data = response.text
        return ProviderHealth(connected=response.is_success, status=response.status_code, data=data)

    async def aclose(self) -> None:
        await self._client.aclose()
