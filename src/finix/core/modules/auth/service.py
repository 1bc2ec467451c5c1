from typing import Any

import structlog

from finix.core.core import Service
from finix.core.modules.auth.models import AuthCompletion, AuthInitiation, AuthStatus
from finix.core.modules.provider.models import ProviderSuccess, ProviderUnauthorized, ProviderUnavailable
from finix.core.modules.session.models import SessionStatus, SessionView
from finix.core.modules.session.store import SessionStore
from finix.errors import (
    InvalidPasscodeError,
    NoPendingSessionError,
    RemoteError,
    RemoteUnavailableError,
    SessionExpiredError,
)
from finix.utils import is_passcode

logger = structlog.get_logger(__name__)

VERIFY_METHOD = "auth/verify"

LOGIN_INSTRUCTIONS = [
    "1. Provide your Fi Money registered phone number",
    "2. Open the login link and sign in",
    "3. Get the passcode from the Fi Money app",
    "4. Complete authentication with the passcode",
]


def _extract_credential(payload: Any) -> str | None:
    if isinstance(payload, dict):
        for key in ("credential", "token", "access_token"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class AuthFlowService(Service):
    """Drives a user's provider session from absent through pending to authenticated."""

    @property
    def store(self) -> SessionStore:
        return self.core.services.session.store

    def login_url(self, session_id: str) -> str:
        return f"{self.config.provider_login_url}?sessionId={session_id}"

    async def initiate(self, user_id: str, phone_number: str) -> AuthInitiation:
        """Start (or restart) the handshake. Any previous session for the user is discarded."""
        session = await self.store.create(user_id, phone_number)

        login_url = self.login_url(session.session_id)
        minutes = self.config.pending_window // 60
        return AuthInitiation(
            session_id=session.session_id,
            login_url=login_url,
            phone_number=session.phone_number,
            expires_at=session.expires_at,
            instructions=[
                "Phone number validated successfully!",
                "1. Open the login link below",
                "2. Sign in with your phone number",
                "3. Enter the passcode shown in the Fi Money app here",
                f"Login link: {login_url}",
                f"The login link expires in {minutes} minutes",
            ],
        )

    async def complete(self, user_id: str, passcode: str) -> AuthCompletion:
        """Verify the passcode with the provider and promote the pending session."""
        if not is_passcode(passcode):
            raise InvalidPasscodeError

        session = await self.store.get(user_id)
        if session is None or session.status != SessionStatus.PENDING:
            raise NoPendingSessionError
        if session.is_expired(self.clock()):
            await self.store.delete(user_id, session.session_id)
            raise SessionExpiredError

        outcome = await self.core.transport.call(
            VERIFY_METHOD,
            {"phoneNumber": session.phone_number, "passcode": passcode},
            session_id=session.session_id,
        )
        if isinstance(outcome, ProviderUnauthorized):
            logger.info("passcode_rejected", user_id=user_id, session_id=session.session_id)
            raise InvalidPasscodeError("Passcode was rejected by Fi Money. Please check it and try again.")
        if isinstance(outcome, ProviderUnavailable):
            raise RemoteUnavailableError(outcome.message)
        if not isinstance(outcome, ProviderSuccess):
            raise RemoteError(f"Authentication failed: {outcome.message}")

        # Fi MCP accepts the session id itself as bearer when it issues no separate token
        credential = _extract_credential(outcome.payload) or session.session_id
        try:
            promoted = await self.store.mark_authenticated(user_id, credential, session_id=session.session_id)
        except NoPendingSessionError:
            # The window ran out during verification and a sweep already removed the record
            if session.is_expired(self.clock()):
                raise SessionExpiredError from None
            raise
        return AuthCompletion(
            session_id=promoted.session_id,
            phone_number=promoted.phone_number,
            expires_at=promoted.expires_at,
            expires_in=self.config.authenticated_window,
        )

    async def disconnect(self, user_id: str) -> bool:
        """Drop the user's session from any state."""
        return await self.store.delete(user_id)

    async def status(self, user_id: str) -> AuthStatus:
        session = await self.store.get_authenticated(user_id)
        if session is not None:
            return AuthStatus(
                authenticated=True,
                message="Fi MCP connection is active",
                session=SessionView.from_domain(session),
            )
        return AuthStatus(
            authenticated=False,
            message="Fi MCP authentication required",
            instructions=LOGIN_INSTRUCTIONS,
        )
