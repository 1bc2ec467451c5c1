import asyncio
from typing import Any

import pydantic
import structlog

from finix.core.core import Service
from finix.core.modules.provider.models import ProviderSuccess, ProviderUnauthorized, ProviderUnavailable
from finix.core.modules.session.store import SessionStore
from finix.core.modules.tools.declarations import PORTFOLIO_COMPONENTS, TOOL_SPECS, ToolSpec
from finix.core.modules.tools.models import (
    CompleteArgs,
    InitiateArgs,
    PortfolioAnalysis,
    ToolError,
    ToolKind,
    ToolResult,
    UserArgs,
)
from finix.errors import (
    AuthenticationRequiredError,
    InvalidInputError,
    RemoteError,
    RemoteUnavailableError,
    UnknownFunctionError,
    UserError,
)

logger = structlog.get_logger(__name__)

TOOLS_CALL_METHOD = "tools/call"


class ToolDispatcherService(Service):
    """Executes the model's function calls, gating every data tool on the caller's provider session."""

    @property
    def store(self) -> SessionStore:
        return self.core.services.session.store

    async def dispatch(self, user_id: str, function_name: str, args: dict[str, Any] | None = None) -> ToolResult:
        """Run one function call. Errors are returned inside the result, never raised."""
        logger.info("tool_call", user_id=user_id, function=function_name)
        try:
            spec = TOOL_SPECS.get(function_name)
            if spec is None:
                raise UnknownFunctionError(function_name)
            parsed = self._parse_args(user_id, spec, args or {})
            data = await self._execute(user_id, spec, parsed)
        except UserError as e:
            logger.info("tool_call_failed", user_id=user_id, function=function_name, error_type=e.error_type)
            return ToolResult(name=function_name, ok=False, error=ToolError.from_error(e))

        return ToolResult(name=function_name, ok=True, data=data)

    def _parse_args(self, user_id: str, spec: ToolSpec, args: dict[str, Any]) -> UserArgs:
        try:
            parsed = spec.args_model.model_validate(args)
        except pydantic.ValidationError as e:
            missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise InvalidInputError(f"Invalid arguments for {spec.name}: {missing or 'malformed'}") from e
        # The caller's identity is authoritative; the model cannot act for someone else
        if parsed.user_id is not None and parsed.user_id != user_id:
            raise InvalidInputError("userId does not match the signed-in user")
        return parsed

    async def _execute(self, user_id: str, spec: ToolSpec, args: UserArgs) -> Any:
        auth = self.core.services.auth
        if spec.kind == ToolKind.AUTH_EXEMPT:
            if isinstance(args, InitiateArgs):
                return (await auth.initiate(user_id, args.phone_number)).model_dump(mode="json")
            if isinstance(args, CompleteArgs):
                return (await auth.complete(user_id, args.passcode)).model_dump(mode="json")
            return (await auth.status(user_id)).model_dump(mode="json")

        if spec.provider_tool is None:
            return (await self.portfolio_analysis(user_id)).model_dump(mode="json")
        return await self._fetch(user_id, spec.provider_tool)

    async def _fetch(self, user_id: str, provider_tool: str) -> Any:
        """Call a provider data tool with the user's credential."""
        session = await self.store.get_authenticated(user_id)
        if session is None:
            raise AuthenticationRequiredError

        outcome = await self.core.transport.call(
            TOOLS_CALL_METHOD,
            {"name": provider_tool, "arguments": {}},
            session_id=session.session_id,
            credential=session.credential,
        )
        if isinstance(outcome, ProviderSuccess):
            logger.debug("provider_data_retrieved", user_id=user_id, provider_tool=provider_tool)
            return outcome.payload
        if isinstance(outcome, ProviderUnauthorized):
            # Demote before reporting so the next call already sees no session
            await self.store.demote(user_id, session.session_id)
            raise AuthenticationRequiredError(
                "Your Fi Money session is no longer valid. Please connect your account again."
            )
        if isinstance(outcome, ProviderUnavailable):
            raise RemoteUnavailableError(outcome.message)
        raise RemoteError(outcome.message)

    async def portfolio_analysis(self, user_id: str) -> PortfolioAnalysis:
        """Fetch all portfolio components concurrently, tolerating individual failures."""
        if not await self.store.is_authenticated(user_id):
            raise AuthenticationRequiredError

        keys = list(PORTFOLIO_COMPONENTS)
        results = await asyncio.gather(
            *(self.dispatch(user_id, PORTFOLIO_COMPONENTS[key]) for key in keys),
            return_exceptions=True,
        )

        outcomes: dict[str, ToolResult] = {}
        for key, result in zip(keys, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.exception("portfolio_component_crashed", user_id=user_id, component=key, exc_info=result)
                result = ToolResult(
                    name=PORTFOLIO_COMPONENTS[key],
                    ok=False,
                    error=ToolError(type="internal_error", message="Unexpected error while fetching data"),
                )
            outcomes[key] = result

        analysis = PortfolioAnalysis(
            summary={key: outcome.data if outcome.ok else None for key, outcome in outcomes.items()},
            available_data={key: outcome.ok for key, outcome in outcomes.items()},
            outcomes=outcomes,
            last_updated=self.clock(),
        )
        logger.info(
            "portfolio_analysis_retrieved",
            user_id=user_id,
            available=sum(analysis.available_data.values()),
            total=len(keys),
        )
        return analysis
