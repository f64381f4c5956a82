import logging
from typing import Optional, Sequence

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from snapcook.app.core.errors import ScrapeError
from snapcook.app.services.browser.base import BrowserCapability, BrowserSession, NavigationPolicy

logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_ARGS = ("--no-sandbox", "--disable-dev-shm-usage")


async def _shutdown(playwright: Playwright, browser: Optional[Browser]) -> None:
    try:
        if browser is not None:
            await browser.close()
    finally:
        await playwright.stop()


class ChromiumSession(BrowserSession):
    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._closed = False

    async def read_meta(self, selector: str) -> Optional[str]:
        try:
            locator = self._page.locator(selector)
            if await locator.count() == 0:
                return None
            return await locator.first.get_attribute("content") or ""
        except PlaywrightError as exc:
            raise ScrapeError("Failed to read page metadata", detail=f"{selector}: {exc}") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await _shutdown(self._playwright, self._browser)


class ChromiumBrowser(BrowserCapability):
    """Headless Chromium via Playwright; every ``open`` launches a fresh browser and page."""

    def __init__(self, headless: bool = True, launch_args: Sequence[str] = DEFAULT_LAUNCH_ARGS):
        self.headless = headless
        self.launch_args = list(launch_args)

    async def open(self, url: str, policy: NavigationPolicy) -> BrowserSession:
        try:
            playwright = await async_playwright().start()
        except PlaywrightError as exc:
            raise ScrapeError("Failed to launch browser", detail=str(exc)) from exc

        browser: Optional[Browser] = None
        try:
            browser = await playwright.chromium.launch(headless=self.headless, args=self.launch_args)
            page = await browser.new_page()
            await page.goto(url, wait_until=policy.wait_until, timeout=policy.timeout_ms)
        except BaseException as exc:
            await _shutdown(playwright, browser)
            if isinstance(exc, PlaywrightTimeoutError):
                raise ScrapeError(
                    "Page navigation timed out", detail=f"{url} after {policy.timeout_seconds}s"
                ) from exc
            if isinstance(exc, PlaywrightError):
                stage = "Page navigation failed" if browser is not None else "Failed to launch browser"
                raise ScrapeError(stage, detail=str(exc)) from exc
            raise

        logger.debug("Browser session opened", extra={"url": url, "wait_until": policy.wait_until})
        return ChromiumSession(playwright, browser, page)
