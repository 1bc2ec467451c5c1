import asyncio
import contextlib
from datetime import timedelta

import structlog

from finix.config import Config
from finix.core.core import Service
from finix.core.modules.session.store import SessionStore
from finix.utils import Clock

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Owns the session store and the periodic sweep of expired records."""

    def __init__(self, config: Config, clock: Clock) -> None:
        super().__init__(config, clock)
        self.store = SessionStore(
            pending_window=timedelta(seconds=config.pending_window),
            authenticated_window=timedelta(seconds=config.authenticated_window),
            clock=clock,
        )
        self._sweep_task: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        """Start the background sweeper."""
        self._sweep_task = asyncio.create_task(self._sweep_loop(), name="session-sweeper")
        logger.debug("session_service_started", sweep_interval=self.config.sweep_interval)

    async def on_stop(self) -> None:
        """Cancel the sweeper and wait for it to finish."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweep_task
        self._sweep_task = None
        logger.debug("session_service_stopped")

    async def sweep(self) -> int:
        removed = await self.store.sweep()
        if removed:
            logger.info("sessions_swept", removed=removed, remaining=len(self.store))
        return removed

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.sweep_interval)
            try:
                await self.sweep()
            except Exception as e:
                # One failed pass must not stop future sweeps
                logger.exception("session_sweep_failed", error=str(e))
