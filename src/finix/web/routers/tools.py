from typing import Any

from fastapi import APIRouter, Body

from finix.core.modules.tools.models import FunctionDeclaration, ToolResult
from finix.web.deps import AppDep, UserIdDep
from finix.web.openapi import ErrorResponse

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get(
    "",
    summary="List tool declarations",
    description="Function declarations advertised to the language model.",
    operation_id="listTools",
)
async def list_tools(app: AppDep) -> list[FunctionDeclaration]:
    return app.get_function_declarations()


@router.post(
    "/{name}",
    summary="Call a tool",
    description=(
        "Execute one function call the way the assistant does. Failures are reported in the result body, "
        "not as HTTP errors."
    ),
    operation_id="callTool",
    responses={
        200: {"description": "Tool result"},
        401: {"model": ErrorResponse, "description": "Missing user identity"},
    },
)
async def call_tool(
    name: str, app: AppDep, user_id: UserIdDep, args: dict[str, Any] = Body(default_factory=dict)
) -> ToolResult:
    return await app.call_tool(user_id, name, args)
