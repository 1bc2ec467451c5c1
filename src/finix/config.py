from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    # Fi MCP provider: a single streaming JSON-RPC endpoint plus the browser login page
    provider_url: str = "http://localhost:8080/mcp/stream"
    provider_login_url: str = "http://localhost:8080/mockWebPage"
    provider_health_url: str = "http://localhost:8080/health"
    provider_timeout: float = 12.0  # seconds, end to end per provider call
    # Session timing, all in seconds
    pending_window: int = 5 * 60
    authenticated_window: int = 30 * 60
    sweep_interval: float = 5 * 60
    llm_model: str = "gemini/gemini-2.0-flash"
    llm_api_key: str = ""
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2048
    max_tool_rounds: int = 3  # model -> tools -> model iterations per chat message
    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    git_commit_date: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "FINIX_",
        "extra": "ignore",
    }
