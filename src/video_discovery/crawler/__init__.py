"""Headless browser loading for live pages."""

from .browser_manager import BrowserManager
from .page_loader import PageLoader
