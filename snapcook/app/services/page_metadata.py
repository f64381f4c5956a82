"""Caption and thumbnail extraction from Instagram posts and YouTube videos.

Each supported platform owns a strategy naming the meta tag that holds the
caption and how its thumbnail is found. A fresh browser session is opened per
call and always closed before returning or raising.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from snapcook.app.core.config import get_settings
from snapcook.app.core.errors import RecipeExtractionError, ScrapeError
from snapcook.app.schemas.extraction import PageMetadata
from snapcook.app.services.browser.base import (
    BrowserCapability,
    BrowserSession,
    NavigationPolicy,
    open_session,
)
from snapcook.app.services.browser.chromium import ChromiumBrowser
from snapcook.app.services.source_identifier import Platform, extract_youtube_id, youtube_thumbnail_url

logger = logging.getLogger(__name__)


async def _read_required_meta(session: BrowserSession, selector: str) -> str:
    content = await session.read_meta(selector)
    if content is None:
        raise ScrapeError("Meta tag not found", detail=f"no element matches {selector}")
    return content


@dataclass(frozen=True)
class PlatformStrategy:
    caption_selector: str

    async def thumbnail(self, session: BrowserSession, url: str) -> Optional[str]:
        raise NotImplementedError


@dataclass(frozen=True)
class InstagramStrategy(PlatformStrategy):
    caption_selector: str = "meta[property='og:description']"
    thumbnail_selector: str = "meta[property='og:image']"

    async def thumbnail(self, session: BrowserSession, url: str) -> Optional[str]:
        return await _read_required_meta(session, self.thumbnail_selector)


@dataclass(frozen=True)
class YouTubeStrategy(PlatformStrategy):
    caption_selector: str = "meta[name='description']"

    async def thumbnail(self, session: BrowserSession, url: str) -> Optional[str]:
        # og:image is unreliable on YouTube; the id-derived URL is deterministic.
        video_id = extract_youtube_id(url)
        return youtube_thumbnail_url(video_id) if video_id else None


STRATEGIES: Dict[Platform, PlatformStrategy] = {
    Platform.INSTAGRAM: InstagramStrategy(),
    Platform.YOUTUBE: YouTubeStrategy(),
}


def default_browser() -> BrowserCapability:
    return ChromiumBrowser(headless=get_settings().browser_headless)


def default_policy() -> NavigationPolicy:
    return NavigationPolicy(timeout_seconds=get_settings().browser_nav_timeout_seconds)


async def extract_page_metadata(
    url: str,
    platform: Platform,
    browser: Optional[BrowserCapability] = None,
    policy: Optional[NavigationPolicy] = None,
) -> PageMetadata:
    strategy = STRATEGIES.get(platform)
    if strategy is None:
        raise ScrapeError("Unsupported platform", detail=f"{platform.value}: {url}")

    browser = browser or default_browser()
    policy = policy or default_policy()
    start = time.perf_counter()
    try:
        async with open_session(browser, url, policy) as session:
            caption = await _read_required_meta(session, strategy.caption_selector)
            thumbnail = await strategy.thumbnail(session, url)
    except RecipeExtractionError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Page scrape failed", extra={"url": url, "platform": platform.value})
        raise ScrapeError("Failed to scrape page", detail=str(exc)) from exc

    logger.info(
        "Page metadata extracted: platform=%s, caption_len=%d, thumbnail=%s, duration_ms=%d",
        platform.value,
        len(caption),
        bool(thumbnail),
        int((time.perf_counter() - start) * 1000),
    )
    return PageMetadata(caption=caption, thumbnail=thumbnail)
