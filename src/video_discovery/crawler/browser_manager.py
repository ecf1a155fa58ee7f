"""
Browser Manager - Video Discovery

Owns the Chromium process used to render pages before discovery. Each page
load runs in a context picked by key, so cookies and storage from one loaded
site never leak into the snapshot of another.
"""

import logging
from typing import Any, Dict, Hashable

from ..errors import BrowserError

logger = logging.getLogger(__name__)


class BrowserManager:
    """
    Shared Chromium with isolated, keyed contexts.

    The browser starts lazily on the first ``get_context`` call. Contexts live
    until their key is cleaned up or ``cleanup_all`` shuts everything down.
    """

    LAUNCH_ARGS = [
        '--disable-dev-shm-usage',  # Small /dev/shm in containers
        '--disable-software-rasterizer',
        '--no-sandbox',  # Needed when running as root
    ]

    def __init__(self, headless: bool = True):
        """
        Args:
            headless: Launch Chromium without a window
        """
        self.browser = None
        self.contexts: Dict[Hashable, Any] = {}
        self.headless = headless
        self.playwright = None

    async def _initialize_browser(self):
        """Start Playwright and Chromium unless already running."""
        if self.browser is not None:
            return

        try:
            from playwright.async_api import async_playwright
        except ImportError:
            logger.error("Playwright not installed")
            raise BrowserError(
                "Playwright not installed. "
                "Install with: pip install playwright && playwright install chromium"
            )

        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=self.LAUNCH_ARGS,
            )
            logger.info("Playwright browser launched")

        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            raise BrowserError(f"Browser launch failed: {str(e)}")

    async def get_context(self, key: Hashable = 'default'):
        """
        Return the context for ``key``, creating it on first request.

        Loads sharing a key share cookies and storage; use distinct keys for
        unrelated pages.

        Args:
            key: Isolation key chosen by the caller

        Returns:
            Playwright browser context
        """
        await self._initialize_browser()

        if key not in self.contexts:
            self.contexts[key] = await self.browser.new_context()
            logger.info(f"Created context for {key}")

        return self.contexts[key]

    async def cleanup_context(self, key: Hashable = 'default'):
        """Close and forget the context for ``key``. Unknown keys are ignored."""
        context = self.contexts.pop(key, None)
        if context is None:
            return

        try:
            await context.close()
            logger.info(f"Cleaned up context for {key}")
        except Exception as e:
            logger.warning(f"Error closing context {key}: {e}")

    async def cleanup_all(self):
        """Close every context, then the browser and Playwright driver."""
        for key in list(self.contexts):
            await self.cleanup_context(key)

        if self.browser:
            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            finally:
                self.browser = None

        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            finally:
                self.playwright = None

        logger.info("Browser cleanup complete")
