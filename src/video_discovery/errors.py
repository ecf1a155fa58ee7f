"""Error types raised by the discovery engine."""


class DiscoveryError(Exception):
    """Base exception for discovery errors."""
    pass


class BrowserError(DiscoveryError):
    """Raised when the headless browser cannot be launched."""
    pass


class PageLoadError(DiscoveryError):
    """Raised when a page cannot be loaded or snapshotted."""
    pass
