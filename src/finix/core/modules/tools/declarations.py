"""Tools the assistant may call, with their schemas and classification."""

from dataclasses import dataclass
from typing import Any

from finix.core.modules.tools.models import (
    CompleteArgs,
    FunctionDeclaration,
    InitiateArgs,
    ParameterSchema,
    ToolKind,
    UserArgs,
)

USER_ID_PROPERTY: dict[str, Any] = {"type": "string", "description": "ID of the signed-in user"}


@dataclass(frozen=True)
class ToolSpec:
    declaration: FunctionDeclaration
    kind: ToolKind
    args_model: type[UserArgs]
    provider_tool: str | None = None  # Fi MCP tool backing a plain data call

    @property
    def name(self) -> str:
        return self.declaration.name


def _declare(name: str, description: str, extra: dict[str, dict[str, Any]] | None = None) -> FunctionDeclaration:
    properties = {"userId": USER_ID_PROPERTY, **(extra or {})}
    return FunctionDeclaration(
        name=name,
        description=description,
        parameters=ParameterSchema(properties=properties, required=list(properties)),
    )


def _data_tool(name: str, description: str, provider_tool: str | None) -> ToolSpec:
    return ToolSpec(_declare(name, description), ToolKind.DATA, UserArgs, provider_tool)


TOOL_SPECS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in [
        _data_tool("getNetWorth", "Get user's current net worth and financial overview", "fetch_net_worth"),
        _data_tool(
            "getMutualFunds", "Get user's mutual fund portfolio and transactions", "fetch_mutual_fund_transactions"
        ),
        _data_tool("getBankTransactions", "Get user's bank account transactions", "fetch_bank_transactions"),
        _data_tool("getEpfDetails", "Get user's EPF (Employee Provident Fund) details", "fetch_epf_details"),
        _data_tool("getCreditReport", "Get user's credit report and score", "fetch_credit_report"),
        _data_tool(
            "getPortfolioAnalysis",
            "Get comprehensive portfolio analysis combining net worth, mutual funds, bank transactions and EPF",
            None,
        ),
        ToolSpec(
            _declare(
                "initiateAuthentication",
                "Start connecting the user's Fi Money account. Returns a login link the user must open.",
                {"phoneNumber": {"type": "string", "description": "Phone number registered with Fi Money"}},
            ),
            ToolKind.AUTH_EXEMPT,
            InitiateArgs,
        ),
        ToolSpec(
            _declare(
                "completeAuthentication",
                "Finish connecting the user's Fi Money account with the 6-digit passcode from the Fi Money app",
                {"passcode": {"type": "string", "description": "6-digit passcode shown in the Fi Money app"}},
            ),
            ToolKind.AUTH_EXEMPT,
            CompleteArgs,
        ),
        ToolSpec(
            _declare("getAuthenticationStatus", "Check whether the user's Fi Money account is connected"),
            ToolKind.AUTH_EXEMPT,
            UserArgs,
        ),
    ]
}

# Sub-calls of getPortfolioAnalysis, keyed by their name in the summary
PORTFOLIO_COMPONENTS: dict[str, str] = {
    "netWorth": "getNetWorth",
    "mutualFunds": "getMutualFunds",
    "bankTransactions": "getBankTransactions",
    "epfDetails": "getEpfDetails",
}


def get_function_declarations() -> list[FunctionDeclaration]:
    return [spec.declaration for spec in TOOL_SPECS.values()]
