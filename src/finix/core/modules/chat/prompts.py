CAPABILITIES = [
    "Net worth analysis",
    "Mutual fund portfolio review",
    "Bank transaction analysis",
    "EPF details",
    "Credit report access",
    "Portfolio recommendations",
]

AUTHENTICATED_SUGGESTIONS = [
    "What's my current net worth?",
    "Show me my mutual fund portfolio",
    "Analyze my bank transactions",
    "What's my EPF balance?",
    "Give me a portfolio analysis",
    "How can I improve my financial health?",
]

ANONYMOUS_SUGGESTIONS = [
    "Connect my Fi Money account",
    "How does FiNIX work?",
    "What financial data can you access?",
    "Is my data secure?",
]


def build_system_prompt(user_id: str, authenticated: bool) -> str:
    """Build the system instruction for one chat turn."""
    connection = (
        "The user's Fi Money account is connected; fetch data with the available functions."
        if authenticated
        else (
            "The user's Fi Money account is NOT connected. Before fetching data, ask for their registered "
            "phone number and call initiateAuthentication, then ask for the 6-digit passcode and call "
            "completeAuthentication."
        )
    )
    capabilities = "\n".join(f"- {capability}" for capability in CAPABILITIES)

    return f"""You are FiNIX, an AI financial assistant powered by Fi Money's Model Context Protocol (MCP).

Your capabilities include:
{capabilities}

CURRENT USER:
- userId: {user_id}
- {connection}

GUIDELINES:
1. Always pass userId "{user_id}" to functions; never use any other user id
2. Use the available functions to fetch real-time data instead of guessing numbers
3. If a function reports that authentication is required, explain how to connect the account
4. If a function reports the provider is unavailable, suggest trying again shortly
5. Provide actionable financial insights and explain financial concepts clearly
6. Be conversational but professional and respect user privacy"""
