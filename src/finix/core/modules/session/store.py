"""Concurrency-safe in-memory store of provider sessions, one record per user."""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import structlog

from finix.core.modules.session.models import Session, SessionId, SessionStatus
from finix.errors import InvalidInputError, NoPendingSessionError, SessionExpiredError
from finix.utils import Clock, is_phone_number, mask_phone_number, normalize_phone_number, now

logger = structlog.get_logger(__name__)


@dataclass
class _UserLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0  # tasks holding or waiting for the lock


def generate_session_id() -> SessionId:
    return SessionId(f"mcp-session-{uuid.uuid4()}")


class SessionStore:
    """Keyed session storage with per-user mutual exclusion.

    Every operation on a user runs under that user's lock, so read-modify-write
    sequences (promote, demote, lazy eviction, sweep) cannot interleave for the
    same user. Different users never contend. Locks are reference-counted and
    dropped once nobody holds or awaits them.
    """

    def __init__(self, pending_window: timedelta, authenticated_window: timedelta, clock: Clock = now) -> None:
        self.pending_window = pending_window
        self.authenticated_window = authenticated_window
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, _UserLock] = {}

    @asynccontextmanager
    async def _locked(self, user_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(user_id)
        if entry is None:
            entry = self._locks[user_id] = _UserLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    async def create(self, user_id: str, phone_number: str) -> Session:
        """Start a pending session, superseding any previous record for the user."""
        if not is_phone_number(phone_number):
            raise InvalidInputError("Invalid phone number format. Please enter a valid phone number.")
        phone_number = normalize_phone_number(phone_number)

        async with self._locked(user_id):
            created_at = self._clock()
            session = Session(
                user_id=user_id,
                session_id=generate_session_id(),
                phone_number=phone_number,
                status=SessionStatus.PENDING,
                created_at=created_at,
                expires_at=created_at + self.pending_window,
            )
            previous = self._sessions.get(user_id)
            self._sessions[user_id] = session

        logger.info(
            "session_created",
            user_id=user_id,
            session_id=session.session_id,
            phone_number=mask_phone_number(phone_number),
            superseded=previous.session_id if previous else None,
        )
        return session.model_copy()

    async def get(self, user_id: str) -> Session | None:
        """Return a copy of the user's record, whatever its status."""
        async with self._locked(user_id):
            session = self._sessions.get(user_id)
            return session.model_copy() if session else None

    async def mark_authenticated(
        self, user_id: str, credential: str, session_id: SessionId | None = None
    ) -> Session:
        """Promote a pending session to authenticated.

        When `session_id` is given the record must still be that session; a
        newer `create` for the same user makes the promotion fail.
        """
        async with self._locked(user_id):
            session = self._sessions.get(user_id)
            if session is None or session.status != SessionStatus.PENDING:
                raise NoPendingSessionError
            if session_id is not None and session.session_id != session_id:
                raise NoPendingSessionError("Authentication session was restarted. Please complete the new login.")

            at = self._clock()
            if session.is_expired(at):
                del self._sessions[user_id]
                logger.info("session_expired", user_id=user_id, session_id=session.session_id, status=session.status)
                raise SessionExpiredError

            promoted = session.model_copy(
                update={
                    "status": SessionStatus.AUTHENTICATED,
                    "authenticated_at": at,
                    "expires_at": at + self.authenticated_window,
                    "credential": credential,
                }
            )
            self._sessions[user_id] = promoted

        logger.info("session_authenticated", user_id=user_id, session_id=promoted.session_id)
        return promoted.model_copy()

    async def get_authenticated(self, user_id: str) -> Session | None:
        """Return the user's session only if authenticated and unexpired.

        An expired record is evicted on the way.
        """
        async with self._locked(user_id):
            session = self._sessions.get(user_id)
            if session is None or session.status != SessionStatus.AUTHENTICATED:
                return None
            if session.is_expired(self._clock()):
                del self._sessions[user_id]
                logger.info("session_expired", user_id=user_id, session_id=session.session_id, status=session.status)
                return None
            return session.model_copy()

    async def is_authenticated(self, user_id: str) -> bool:
        return await self.get_authenticated(user_id) is not None

    async def demote(self, user_id: str, session_id: SessionId) -> bool:
        """Expire an authenticated session after the provider rejected its credential.

        Only the named session is affected; a record that has since been
        replaced by a fresh handshake is left alone.
        """
        async with self._locked(user_id):
            session = self._sessions.get(user_id)
            if session is None or session.session_id != session_id:
                return False
            del self._sessions[user_id]

        logger.warning("session_demoted", user_id=user_id, session_id=session_id, status=SessionStatus.EXPIRED)
        return True

    async def delete(self, user_id: str, session_id: SessionId | None = None) -> bool:
        """Remove the user's record. Idempotent."""
        async with self._locked(user_id):
            session = self._sessions.get(user_id)
            if session is None or (session_id is not None and session.session_id != session_id):
                return False
            del self._sessions[user_id]

        logger.info(
            "session_deleted", user_id=user_id, session_id=session.session_id, status=SessionStatus.DISCONNECTED
        )
        return True

    async def sweep(self, at: datetime | None = None) -> int:
        """Remove every expired record regardless of status. Returns the number removed."""
        at = at or self._clock()
        removed = 0
        for user_id in list(self._sessions):
            async with self._locked(user_id):
                # Re-read under the lock: the record may have been promoted or replaced meanwhile
                session = self._sessions.get(user_id)
                if session is None or not session.is_expired(at):
                    continue
                del self._sessions[user_id]
                removed += 1
                logger.info("session_swept", user_id=user_id, session_id=session.session_id, status=session.status)
        return removed
