"""
Page Loader - Video Discovery

Renders a page in headless Chromium and snapshots it into a Document.
Runtime-only state (intrinsic video size, duration, computed backgrounds) is
copied into snapshot attributes before the markup is read.
"""

import asyncio
import logging
from typing import Hashable

from ..config import BACKGROUND_SCAN_LIMIT, BROWSER_TIMEOUT
from ..document import Document
from ..errors import PageLoadError
from .browser_manager import BrowserManager

logger = logging.getLogger(__name__)

PLAYER_SELECTORS = [
    'video',
    '.video-player',
    '.player',
    '.video-container',
    'iframe[src*="video"]',
    '[id*="player"]',
    'object[type*="video"]',
    'embed[type*="video"]',
]

SNAPSHOT_SCRIPT = """
(limit) => {
    document.querySelectorAll('video').forEach(video => {
        if (video.videoWidth) video.setAttribute('data-video-width', video.videoWidth);
        if (video.videoHeight) video.setAttribute('data-video-height', video.videoHeight);
        if (!isNaN(video.duration)) video.setAttribute('data-duration', video.duration);
    });
    const elements = document.querySelectorAll('*');
    const count = limit > 0 ? Math.min(limit, elements.length) : elements.length;
    for (let i = 0; i < count; i++) {
        const background = getComputedStyle(elements[i]).backgroundImage;
        if (background && background.includes('url(')) {
            elements[i].setAttribute('data-computed-bg', background);
        }
    }
}
"""


class PageLoader:
    """
    Page Loader - Rendered Document Snapshots

    Only reads what the page renders; network traffic is not inspected.
    """

    def __init__(self, browser_manager: BrowserManager, timeout: int = BROWSER_TIMEOUT,
                 settle_delay: float = 2.0):
        """
        Initialize loader.

        Args:
            browser_manager: Browser manager instance
            timeout: Navigation timeout in milliseconds
            settle_delay: Seconds to wait for late-loading players
        """
        self.browser = browser_manager
        self.timeout = timeout
        self.settle_delay = settle_delay

    async def load(self, url: str, key: Hashable = 'default') -> Document:
        """
        Load a page and return its rendered document.

        Args:
            url: Page URL
            key: Browser context key

        Returns:
            Document with base URL set to the final page URL

        Raises:
            PageLoadError: If navigation or snapshotting fails
        """
        context = await self.browser.get_context(key)
        page = await context.new_page()

        try:
            logger.info(f"Navigating to: {url}")
            await page.goto(url, wait_until='domcontentloaded', timeout=self.timeout)

            await self._wait_for_video_player(page)

            await page.evaluate(SNAPSHOT_SCRIPT, BACKGROUND_SCAN_LIMIT)
            markup = await page.content()

            logger.info(f"Snapshot taken: {len(markup)} bytes from {page.url}")
            return Document.from_html(markup, url=page.url)

        except Exception as e:
            logger.error(f"Page load error for {url}: {e}", exc_info=True)
            raise PageLoadError(f"Failed to load page: {str(e)}")

        finally:
            await page.close()

    async def _wait_for_video_player(self, page) -> None:
        """
        Wait for a video player to appear.

        Args:
            page: Playwright page object
        """
        for selector in PLAYER_SELECTORS:
            try:
                element = await page.wait_for_selector(selector, timeout=5000)
                if element:
                    logger.debug(f"Found video player with selector: {selector}")
                    break
            except Exception as e:
                logger.debug(f"No player for {selector}: {e}")
                continue

        # Give players a moment to load metadata
        await asyncio.sleep(self.settle_delay)
