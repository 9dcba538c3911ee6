"""
BrowserSessionProvider - Acquires and releases Playwright browser sessions.

Each request gets its own Browser, either freshly launched or attached to a
running Chrome over CDP. The Playwright driver underneath is started once per
process on first use and stopped on shutdown.
"""
import asyncio
import uuid
from datetime import datetime
from typing import Any, Callable, Optional

from ..config import ServiceConfig
from ..errors import BrowserConnectionError
from ..logging_config import get_logger
from .models import BrowserSession, BrowserSessionStatus, SessionMode

logger = get_logger("script_runner.browser.provider")


def _default_playwright_factory():
    from playwright.async_api import async_playwright
    return async_playwright()


class BrowserSessionProvider:
    """Launches or attaches one browser per acquire() call."""

    def __init__(self, config: ServiceConfig, playwright_factory: Optional[Callable[[], Any]] = None):
        self.config = config
        self._playwright_factory = playwright_factory or _default_playwright_factory
        self._playwright = None
        self._lock = asyncio.Lock()

    @property
    def mode(self) -> SessionMode:
        return SessionMode.LOCAL if self.config.use_local_playwright else SessionMode.CDP

    @property
    def chromium(self):
        """The engine's Chromium namespace, handed to scripts as ``chromium``."""
        if self._playwright is None:
            return None
        return self._playwright.chromium

    async def _ensure_playwright(self):
        """Lazy-init Playwright on first use."""
        async with self._lock:
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
                logger.info("Playwright initialized")
        return self._playwright

    async def acquire(self) -> BrowserSession:
        """Launch or attach a browser, raising BrowserConnectionError on failure. No retry."""
        session_id = uuid.uuid4().hex[:8]
        if self.mode == SessionMode.LOCAL:
            return await self._launch(session_id)
        return await self._connect(session_id)

    async def _launch(self, session_id: str) -> BrowserSession:
        logger.info_with("Attempting to launch local Playwright Chromium instance", session_id=session_id)
        try:
            playwright = await self._ensure_playwright()
            browser = await playwright.chromium.launch(headless=self.config.headless)
        except Exception as e:
            message = f"Failed to launch local Playwright Chromium: {e}"
            logger.error_with(message, session_id=session_id)
            raise BrowserConnectionError(message, mode=SessionMode.LOCAL.value, cause=e) from e

        logger.info_with("Launched local Playwright Chromium instance", session_id=session_id)
        return BrowserSession(id=session_id, mode=SessionMode.LOCAL, browser=browser)

    async def _connect(self, session_id: str) -> BrowserSession:
        endpoint = self.config.cdp_endpoint_url
        logger.info_with("Attempting to connect to CDP endpoint", session_id=session_id, endpoint=endpoint)
        try:
            playwright = await self._ensure_playwright()
            browser = await playwright.chromium.connect_over_cdp(endpoint)
        except Exception as e:
            message = f"Failed to connect to remote Chrome via CDP: {e}"
            logger.error_with(message, session_id=session_id, endpoint=endpoint)
            raise BrowserConnectionError(message, mode=SessionMode.CDP.value, endpoint=endpoint, cause=e) from e

        logger.info_with("Connected to remote Chrome instance via CDP", session_id=session_id, endpoint=endpoint)
        return BrowserSession(id=session_id, mode=SessionMode.CDP, browser=browser, endpoint=endpoint)

    async def release(self, session: BrowserSession) -> bool:
        """Close the session's browser. Errors are logged, never raised."""
        if not session.is_open:
            return False

        logger.info_with("Closing browser connection", session_id=session.id)
        try:
            await session.browser.close()
            session.status = BrowserSessionStatus.CLOSED
            logger.info_with("Browser connection closed", session_id=session.id)
        except Exception as e:
            session.status = BrowserSessionStatus.ERROR
            logger.error_with(f"Error closing browser: {e}", session_id=session.id)
        session.closed_at = datetime.now().isoformat()
        return True

    async def shutdown(self):
        """Stop the Playwright driver. Called on server shutdown."""
        async with self._lock:
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                    logger.info("Playwright stopped")
                except Exception as e:
                    logger.error(f"Error stopping Playwright: {e}")
                self._playwright = None
