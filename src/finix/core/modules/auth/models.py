from datetime import datetime

from pydantic import BaseModel, Field

from finix.core.modules.session.models import SessionId, SessionView


class AuthInitiation(BaseModel):
    """Result of starting the provider login handshake."""

    session_id: SessionId
    login_url: str = Field(..., description="Provider login page the user must open")
    phone_number: str
    expires_at: datetime
    instructions: list[str]


class AuthCompletion(BaseModel):
    """Result of a successful passcode verification."""

    session_id: SessionId
    phone_number: str
    expires_at: datetime
    expires_in: int = Field(..., description="Seconds until the authenticated session expires")
    message: str = "Fi Money account connected successfully!"


class AuthStatus(BaseModel):
    authenticated: bool
    message: str
    instructions: list[str] | None = None
    session: SessionView | None = None
