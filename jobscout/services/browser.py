"""Shared headless browser lifecycle manager.

The heuristic career page crawler renders pages with Chromium through
Playwright. Launching a browser is expensive and an idle one holds hundreds
of megabytes, so a single instance is launched lazily, reused across crawls
and closed again after a period without use.
"""

import asyncio
import logging
import time

from playwright.async_api import Browser, Error as PlaywrightError, Playwright, async_playwright

from jobscout.config import settings

logger = logging.getLogger(__name__)

# Chromium flags tuned for low memory use on small hosts
BROWSER_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-default-apps",
    "--disable-sync",
    "--disable-translate",
    "--hide-scrollbars",
    "--mute-audio",
    "--no-first-run",
    "--safebrowsing-disable-auto-update",
    "--js-flags=--max-old-space-size=256",
    "--single-process",
]


class BrowserManager:
    """Lazily launched, idle-closing Chromium instance.

    Usage:
        browser = await manager.acquire()
        try:
            page = await browser.new_page()
            ...
        finally:
            manager.release()

    ``acquire()`` cancels any pending idle close; ``release()`` arms it again.
    The crawl lock guarantees a single user at a time, so no internal locking
    is needed around the browser itself.

    Args:
        idle_timeout: Seconds without use before the browser is closed.
            Defaults to settings.browser_idle_timeout
    """

    def __init__(self, idle_timeout: float | None = None):
        self.idle_timeout = (
            idle_timeout if idle_timeout is not None else settings.browser_idle_timeout
        )
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._idle_task: asyncio.Task | None = None
        self.last_used: float | None = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it if needed."""
        self._cancel_idle_close()
        if not self.is_running:
            # A disconnected browser still owns a driver process
            await self._shutdown()
            self._playwright, self._browser = await self._launch()
            logger.info("Launched headless Chromium for career page crawling")
        self.last_used = time.monotonic()
        return self._browser

    def release(self) -> None:
        """Mark the browser idle and schedule it to close after the idle timeout."""
        self.last_used = time.monotonic()
        self._cancel_idle_close()
        if self._browser is not None:
            self._idle_task = asyncio.create_task(self._close_when_idle())

    async def close(self) -> None:
        """Close the browser now. Safe to call when nothing is running."""
        self._cancel_idle_close()
        await self._shutdown()

    async def _launch(self) -> tuple[Playwright, Browser]:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=True,
                args=BROWSER_LAUNCH_ARGS,
            )
        except Exception:
            await playwright.stop()
            raise
        return playwright, browser

    async def _close_when_idle(self) -> None:
        await asyncio.sleep(self.idle_timeout)
        logger.info(f"Closing browser after {self.idle_timeout:.0f}s idle")
        self._idle_task = None
        await self._shutdown()

    def _cancel_idle_close(self) -> None:
        task, self._idle_task = self._idle_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _shutdown(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if browser is not None:
            try:
                await browser.close()
                logger.info("Browser closed")
            except PlaywrightError as e:
                logger.debug(f"Browser already closed: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError as e:
                logger.debug(f"Playwright driver already stopped: {e}")


# Process-wide browser shared by all heuristic crawls
browser_manager = BrowserManager()
