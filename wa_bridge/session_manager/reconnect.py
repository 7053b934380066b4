"""Fixed-delay, unbounded reconnection of the chat client."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class ReconnectScheduler:
    """Re-runs ``initialize`` after a fixed delay until it succeeds.

    There is no retry ceiling and no backoff. At most one attempt is pending
    at any time; ``cancel()`` drops it.
    """

    def __init__(
        self,
        initialize: Callable[[], Awaitable[None]],
        delay: float = 5.0,
        before_attempt: Optional[Callable[[], None]] = None,
    ):
        self._initialize = initialize
        self._delay = delay
        self._before_attempt = before_attempt
        self._task: Optional[asyncio.Task] = None
        self.attempts = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> bool:
        """Schedule a reconnect attempt. Returns False if one is already pending."""
        if self.pending:
            logger.info("Reconnect already scheduled, ignoring.")
            return False

        logger.info(f"Reconnecting in {self._delay:g}s...")
        self._task = asyncio.create_task(self._run(), name="reconnect")
        return True

    async def cancel(self) -> None:
        if not self.pending:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Pending reconnect cancelled.")

    async def _run(self):
        while True:
            await asyncio.sleep(self._delay)
            self.attempts += 1
            try:
                if self._before_attempt is not None:
                    self._before_attempt()
                logger.info(f"Reconnect attempt #{self.attempts}...")
                await self._initialize()
                return
            except Exception as e:
                logger.error(f"Reconnect attempt #{self.attempts} failed: {e}")
