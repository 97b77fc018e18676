# backend/browser.py
import logging
from enum import Enum
from typing import Dict
from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from backend.config import Settings
from backend.errors import LaunchError, NavigationError, SessionLostError

logger = logging.getLogger(__name__)

# Recording has to run unattended at full speed in a tab nobody looks at,
# and the visualizer pulls media cross-origin.
LAUNCH_ARGS = [
    "--autoplay-policy=no-user-gesture-required",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-software-rasterizer",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--no-first-run",
    "--disable-crash-reporter",
    "--disable-extensions",
    "--disable-component-extensions-with-background-pages",
    "--disable-features=ChromeBrowserCloudManagement",
    "--disable-site-isolation-trials",
    "--disable-web-security",
]

CAPABILITY_SCRIPT = """() => ({
    hasStartRecording: typeof window.startRecording === 'function',
    hasIsSketchReady: typeof window.isSketchReady === 'function',
    hasIsRecordingFinished: typeof window.isRecordingFinished === 'function',
    hasGetRecordedVideo: typeof window.getRecordedVideo === 'function',
})"""


class SessionState(str, Enum):
    OPEN = "open"
    DISCONNECTED = "disconnected"
    CLOSED = "closed"


class BrowserSession:
    """One browser process with a single page, owned by one render job.

    Use ``BrowserSession.open`` to create one and ``close`` to release it.
    ``close`` may be called any number of times and never raises.
    """

    def __init__(self, playwright, browser, page):
        self._playwright = playwright
        self.browser = browser
        self.page = page
        self.state = SessionState.OPEN
        browser.on("disconnected", self._on_disconnected)
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        page.on("crash", self._on_crash)

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    @classmethod
    async def open(cls, settings: Settings) -> "BrowserSession":
        launch_ms = settings.launch_timeout * 1000
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise LaunchError(f"Could not start the playwright driver: {e}") from e

        try:
            browser = await playwright.chromium.launch(
                executable_path=settings.executable_path,
                headless=settings.headless,
                args=LAUNCH_ARGS,
                ignore_default_args=["--enable-automation"],
                timeout=launch_ms,
            )
        except Exception as e:
            await _stop_quietly(playwright)
            raise LaunchError(f"Could not launch browser: {e}") from e

        try:
            page = await browser.new_page()
        except Exception as e:
            await _stop_quietly(playwright, browser)
            raise LaunchError(f"Could not open a browser tab: {e}") from e

        page.set_default_navigation_timeout(launch_ms)
        logger.info(f"Browser session opened ({settings.executable_path or 'bundled chromium'})")
        return cls(playwright, browser, page)

    async def close(self) -> None:
        previous = self.state
        if previous is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED

        if previous is SessionState.OPEN:
            logger.info("Starting graceful browser shutdown...")
            try:
                await self.page.close()
                logger.info("Page closed successfully")
            except Exception as e:
                logger.warning(f"Error closing page: {e}")
            try:
                await self.browser.close()
                logger.info("Browser closed successfully")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
        else:
            logger.info("Browser already disconnected, skipping page and browser close")

        await _stop_quietly(self._playwright)

    async def screenshot(self, path: str) -> bool:
        """Best-effort capture of the current page. Never raises."""
        if not self.is_open:
            logger.warning(f"Skipping screenshot, session is {self.state.value}")
            return False
        try:
            await self.page.screenshot(path=path)
        except Exception as e:
            logger.warning(f"Error taking screenshot: {e}")
            return False
        logger.info(f"Saved diagnostic screenshot to {path}")
        return True

    def _on_disconnected(self, _browser) -> None:
        if self.state is SessionState.OPEN:
            logger.error("Browser disconnected unexpectedly")
            self.state = SessionState.DISCONNECTED

    def _on_console(self, msg) -> None:
        logger.info(f"Browser console: {msg.type} {msg.text}")

    def _on_page_error(self, error) -> None:
        logger.error(f"Page error: {error}")

    def _on_crash(self, _page) -> None:
        logger.error("Page crashed")


async def _stop_quietly(playwright, browser=None) -> None:
    if browser is not None:
        try:
            await browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
    try:
        await playwright.stop()
    except Exception as e:
        logger.warning(f"Error stopping playwright: {e}")


async def navigate(session: BrowserSession, url: str, timeout: float) -> None:
    """Load ``url`` and wait until the network has gone idle."""
    logger.info(f"Navigating to: {url}")
    try:
        await session.page.goto(url, wait_until="networkidle", timeout=timeout * 1000)
    except PlaywrightTimeoutError as e:
        raise NavigationError(f"Timed out after {timeout:g}s waiting for {url} to load") from e
    except PlaywrightError as e:
        raise NavigationError(f"Failed to load {url}: {e}") from e


async def probe_capabilities(session: BrowserSession) -> Dict[str, bool]:
    """Report which recording hooks the loaded page exposes on ``window``."""
    try:
        found = await session.page.evaluate(CAPABILITY_SCRIPT)
    except PlaywrightError as e:
        raise SessionLostError(f"Lost the page while inspecting it: {e}") from e
    logger.info(f"Window properties: {found}")
    missing = [name for name in ("hasIsRecordingFinished", "hasGetRecordedVideo") if not found.get(name)]
    if missing:
        logger.warning(f"Page is missing recording hooks: {', '.join(missing)}")
    return found
