"""Playwright-driven WhatsApp Web client: launch, login watch, chat queries."""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from playwright.async_api import BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..config import BROWSER_TIMEOUT
from ..constants import (
    CHROMIUM_ARGS,
    EVENT_AUTH_FAILURE,
    EVENT_AUTHENTICATED,
    EVENT_DISCONNECTED,
    EVENT_QR,
    EVENT_READY,
    JS_GET_CHATS,
    JS_READ_QR_CODE,
    LIFECYCLE_EVENTS,
    SELECTORS,
    WHATSAPP_WEB_URL,
)

logger = logging.getLogger(__name__)


class ChatClientError(RuntimeError):
    """A chat query could not be served by the browser session."""


class WhatsAppWebClient:
    """Keeps a logged-in WhatsApp Web tab open in a persistent Chromium profile.

    Emits ``qr(code)``, ``authenticated()``, ``ready()``, ``auth_failure(reason)``
    and ``disconnected(reason)`` to handlers registered with ``on()``.
    """

    def __init__(
        self,
        profile_dir: Path,
        executable_path: Optional[str] = None,
        headless: bool = True,
        timeout: int = BROWSER_TIMEOUT,
        auth_timeout: float = 0,
        qr_max_retries: int = 0,
        watch_interval: float = 1.0,
    ):
        self.profile_dir = profile_dir
        self.executable_path = executable_path
        self.headless = headless
        self.timeout = timeout
        self.auth_timeout = auth_timeout
        self.qr_max_retries = qr_max_retries
        self.watch_interval = watch_interval

        self._handlers: dict[str, list[Callable[..., Any]]] = {name: [] for name in LIFECYCLE_EVENTS}
        self._playwright: Optional[Playwright] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._watcher: Optional[asyncio.Task] = None
        self._context_closed = False
        self._closing = False
        self._reset_session_flags()

    def _reset_session_flags(self):
        self._authenticated = False
        self._ready = False
        self._last_qr_code: Optional[str] = None
        self._qr_count = 0
        self._auth_timeout_fired = False

    @property
    def is_running(self) -> bool:
        return self._context is not None

    @property
    def is_ready(self) -> bool:
        return self._ready

    # ── Events ───────────────────────────────────────────────────────────────

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown event: {event}")
        self._handlers[event].append(handler)

    async def _emit(self, event: str, *args):
        for handler in list(self._handlers[event]):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Handler for '{event}' failed: {e}", exc_info=True)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Launch Chromium on the profile and open WhatsApp Web.

        Returns once the page is loaded; login progress is reported through
        events by a background watch task.
        """
        if self.is_running:
            await self._teardown()

        self._reset_session_flags()
        self._context_closed = False
        self._closing = False

        try:
            logger.info(f"Launching Chromium (headless={self.headless}, profile={self.profile_dir})...")
            self._playwright = await async_playwright().start()
            self._context = await self._playwright.chromium.launch_persistent_context(
                user_data_dir=str(self.profile_dir),
                executable_path=self.executable_path,
                headless=self.headless,
                args=CHROMIUM_ARGS,
            )
            self._context.on("close", self._on_context_close)

            pages = self._context.pages
            self._page = pages[0] if pages else await self._context.new_page()
            self._page.set_default_timeout(self.timeout)

            logger.info(f"Navigating to {WHATSAPP_WEB_URL}")
            await self._page.goto(WHATSAPP_WEB_URL, wait_until="domcontentloaded")
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self._teardown()
            raise

        self._watcher = asyncio.create_task(self._watch(), name="whatsapp-watch")

    async def destroy(self) -> None:
        """Close the browser. The profile directory keeps the login."""
        logger.info("Destroying WhatsApp client...")
        await self._teardown()
        logger.info("WhatsApp client destroyed.")

    async def _teardown(self):
        self._closing = True

        watcher, self._watcher = self._watcher, None
        if watcher is not None and watcher is not asyncio.current_task():
            watcher.cancel()
            try:
                await watcher
            except asyncio.CancelledError:
                pass

        try:
            if self._context:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context: {e}")
        finally:
            self._context = None
            self._page = None

        try:
            if self._playwright:
                await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")
        finally:
            self._playwright = None

        self._ready = False

    def _on_context_close(self, _context: BrowserContext):
        self._context_closed = True

    # ── Login watch ──────────────────────────────────────────────────────────

    async def _detect_phase(self) -> tuple[str, Optional[str]]:
        """Return ("chats", None), ("qr", code) or ("loading", None)."""
        if await self._page.query_selector(SELECTORS["chat_list"]):
            return "chats", None
        code = await self._page.evaluate(JS_READ_QR_CODE)
        if code:
            return "qr", code
        return "loading", None

    async def _watch(self):
        loop = asyncio.get_running_loop()
        started = loop.time()

        while True:
            try:
                phase, code = await self._detect_phase()
            except PlaywrightError as e:
                if self._closing:
                    return
                if self._context_closed or self._page is None or self._page.is_closed():
                    reason = "CONTEXT_CLOSED" if self._context_closed else "NAVIGATION"
                    await self._disconnect(reason)
                    return
                # Execution context replaced by an in-app navigation
                logger.debug(f"Transient page error: {e}")
                await asyncio.sleep(self.watch_interval)
                continue

            if phase == "chats":
                if not self._authenticated:
                    self._authenticated = True
                    await self._emit(EVENT_AUTHENTICATED)
                if not self._ready:
                    self._ready = True
                    await self._emit(EVENT_READY)

            elif phase == "qr":
                if self._ready:
                    await self._disconnect("LOGOUT")
                    return
                if code != self._last_qr_code:
                    self._last_qr_code = code
                    self._qr_count += 1
                    if self.qr_max_retries and self._qr_count > self.qr_max_retries:
                        await self._disconnect("Max qrcode retries reached")
                        return
                    await self._emit(EVENT_QR, code)

            elif (
                self.auth_timeout
                and not self._authenticated
                and self._last_qr_code is None
                and not self._auth_timeout_fired
                and loop.time() - started > self.auth_timeout
            ):
                self._auth_timeout_fired = True
                await self._emit(EVENT_AUTH_FAILURE, "auth timeout")

            await asyncio.sleep(self.watch_interval)

    async def _disconnect(self, reason: str):
        self._authenticated = False
        self._ready = False
        await self._teardown()
        await self._emit(EVENT_DISCONNECTED, reason)

    # ── Queries ──────────────────────────────────────────────────────────────

    async def get_chats(self) -> list[dict]:
        """Return raw chat objects from WhatsApp Web's chat collection."""
        if self._page is None or not self._ready:
            raise ChatClientError("WhatsApp client is not ready.")

        try:
            chats = await self._page.evaluate(JS_GET_CHATS)
        except PlaywrightError as e:
            raise ChatClientError(f"Failed to list chats: {e}") from e

        logger.info(f"Fetched {len(chats)} chats")
        return chats
