"""Provider session models."""

from datetime import datetime
from enum import StrEnum
from typing import NewType, Self

from pydantic import BaseModel, Field

SessionId = NewType("SessionId", str)


class SessionStatus(StrEnum):
    """Lifecycle states of a provider session record."""

    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"
    DISCONNECTED = "disconnected"


class Session(BaseModel):
    """Per-user provider authentication session.

    At most one record exists per user. `expires_at` always matches the
    current status: creation + pending window while pending, authentication +
    authenticated window once authenticated.
    """

    user_id: str
    session_id: SessionId
    phone_number: str
    status: SessionStatus = SessionStatus.PENDING
    created_at: datetime
    authenticated_at: datetime | None = None
    expires_at: datetime
    credential: str | None = Field(default=None, exclude=True, repr=False)

    def is_expired(self, at: datetime) -> bool:
        return at > self.expires_at


class SessionView(BaseModel):
    """Session representation safe to return to clients (no credential)."""

    session_id: SessionId
    status: SessionStatus
    phone_number: str
    created_at: datetime
    authenticated_at: datetime | None
    expires_at: datetime

    @classmethod
    def from_domain(cls, session: Session) -> Self:
        return cls(
            session_id=session.session_id,
            status=session.status,
            phone_number=session.phone_number,
            created_at=session.created_at,
            authenticated_at=session.authenticated_at,
            expires_at=session.expires_at,
        )
