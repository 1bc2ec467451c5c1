"""Tests for the advertised tool catalog."""

from finix.core.modules.tools.declarations import PORTFOLIO_COMPONENTS, TOOL_SPECS, get_function_declarations
from finix.core.modules.tools.models import ToolKind


class TestCatalog:
    def test_classification(self):
        """Test that only the handshake tools are callable without a session."""
        exempt = {name for name, spec in TOOL_SPECS.items() if spec.kind == ToolKind.AUTH_EXEMPT}
        assert exempt == {"initiateAuthentication", "completeAuthentication", "getAuthenticationStatus"}

    def test_every_tool_requires_user_id(self):
        for declaration in get_function_declarations():
            assert "userId" in declaration.parameters.properties
            assert "userId" in declaration.parameters.required

    def test_handshake_arguments(self):
        assert TOOL_SPECS["initiateAuthentication"].declaration.parameters.required == ["userId", "phoneNumber"]
        assert TOOL_SPECS["completeAuthentication"].declaration.parameters.required == ["userId", "passcode"]

    def test_portfolio_components_are_data_tools(self):
        for name in PORTFOLIO_COMPONENTS.values():
            assert TOOL_SPECS[name].kind == ToolKind.DATA
            assert TOOL_SPECS[name].provider_tool is not None

    def test_openai_tool_format(self):
        tool = TOOL_SPECS["getNetWorth"].declaration.to_openai_tool()

        assert tool["type"] == "function"
        assert tool["function"]["name"] == "getNetWorth"
        assert tool["function"]["parameters"]["type"] == "object"
