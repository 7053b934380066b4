"""Session State Mirror: applies chat client lifecycle events to SessionState.

Events are queued and applied by a single consumer task so they take effect
strictly in the order the client emitted them, even though QR rendering runs
in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..models.events import (
    AuthFailed,
    Authenticated,
    Disconnected,
    LifecycleEvent,
    QrIssued,
    Ready,
)
from ..models.session import SessionState
from .qr import QrEncodingError, encode_qr_data_url

logger = logging.getLogger(__name__)

DisconnectListener = Callable[[Disconnected], Awaitable[None]]


class SessionMirror:
    """Owns the SessionState and is its only writer."""

    def __init__(self, encoder: Callable[[str], str] = encode_qr_data_url):
        self._state = SessionState()
        self._encoder = encoder
        self._queue: asyncio.Queue[LifecycleEvent] = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._disconnect_listeners: list[DisconnectListener] = []

    def snapshot(self) -> SessionState:
        """Return a copy of the current state."""
        return self._state.model_copy()

    def add_disconnect_listener(self, listener: DisconnectListener) -> None:
        self._disconnect_listeners.append(listener)

    # ── Consumer lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume(), name="session-mirror")

    async def stop(self) -> None:
        if self._consumer is None:
            return
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None

    async def dispatch(self, event: LifecycleEvent) -> None:
        """Queue an event for in-order application."""
        await self._queue.put(event)

    async def join(self) -> None:
        """Wait until every queued event has been applied."""
        await self._queue.join()

    async def _consume(self):
        while True:
            event = await self._queue.get()
            try:
                await self.apply(event)
            except Exception as e:
                logger.error(f"Failed to apply {type(event).__name__}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    # ── Event handlers ───────────────────────────────────────────────────────

    async def apply(self, event: LifecycleEvent) -> None:
        """Apply one event. Callers must not run two applies concurrently."""
        if isinstance(event, QrIssued):
            await self._on_qr(event)
        elif isinstance(event, Ready):
            self._on_ready()
        elif isinstance(event, Authenticated):
            self._on_authenticated()
        elif isinstance(event, AuthFailed):
            self._on_auth_failure(event)
        elif isinstance(event, Disconnected):
            await self._on_disconnected(event)
        else:
            raise TypeError(f"Unsupported lifecycle event: {event!r}")

    async def _on_qr(self, event: QrIssued):
        logger.info("New QR code issued. Scan it from WhatsApp on your phone.")
        try:
            data_url = await asyncio.to_thread(self._encoder, event.code)
        except QrEncodingError as e:
            logger.error(f"Error generating QR image: {e}")
            return

        self._state.last_qr = data_url
        self._state.authenticated = False
        self._state.ready = False

    def _on_ready(self):
        # The chat list is only reachable after login.
        self._state.authenticated = True
        self._state.ready = True
        logger.info("WhatsApp session ready.")

    def _on_authenticated(self):
        self._state.authenticated = True
        self._state.last_auth_failure = None
        self._state.last_qr = None
        logger.info("Session authenticated.")

    def _on_auth_failure(self, event: AuthFailed):
        self._state.authenticated = False
        self._state.ready = False
        self._state.last_auth_failure = event.reason_text
        logger.error(f"Authentication failed: {event.reason_text}")

    async def _on_disconnected(self, event: Disconnected):
        self._state.ready = False
        self._state.last_disconnect = event.reason_text
        logger.warning(f"Client disconnected: {event.reason_text}")

        for listener in self._disconnect_listeners:
            try:
                await listener(event)
            except Exception as e:
                logger.error(f"Disconnect listener failed: {e}", exc_info=True)
