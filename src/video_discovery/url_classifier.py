"""
URL Classifier - Video Discovery

Pure functions mapping a resource URL to a format tag and video verdicts.
Detection is permissive on purpose; only the download boundary is strict.
"""

import logging
from typing import Iterable
from urllib.parse import urlparse

from .models import DEFAULT_FORMAT

logger = logging.getLogger(__name__)

# Container extensions returned verbatim as the format tag
CONTAINER_FORMATS = ('mp4', 'webm', 'avi', 'mov', 'wmv', 'flv', 'mkv', 'm4v')

# Adaptive-streaming manifest markers
MANIFEST_FORMATS = {
    '.m3u8': 'HLS',
    '.mpd': 'DASH',
}

VIDEO_EXTENSIONS = CONTAINER_FORMATS + ('m3u8', 'mpd')

# Path/query tokens that suggest a stream without an extension
VIDEO_TOKENS = ('video', 'stream', 'media')

DOWNLOADABLE_SCHEMES = ('http', 'https')


def classify_format(url: str) -> str:
    """
    Map a URL to its format tag.

    Args:
        url: Resource URL (may be relative or malformed)

    Returns:
        Container extension, 'HLS', 'DASH', or 'mp4' when unrecognized
    """
    if not isinstance(url, str) or not url:
        return DEFAULT_FORMAT

    extension = url.split('.')[-1].split('?')[0].split('#')[0].lower()
    if extension in CONTAINER_FORMATS:
        return extension

    url_lower = url.lower()
    for marker, tag in MANIFEST_FORMATS.items():
        if marker in url_lower:
            return tag

    return DEFAULT_FORMAT


def looks_like_video(url: str) -> bool:
    """
    Check if a URL plausibly points at video.

    Favors false positives: any known extension substring or any of the
    tokens 'video', 'stream', 'media' is enough.
    """
    if not isinstance(url, str) or not url:
        return False

    url_lower = url.lower()

    for ext in VIDEO_EXTENSIONS:
        if f'.{ext}' in url_lower or f'{ext}?' in url_lower:
            return True

    return any(token in url_lower for token in VIDEO_TOKENS)


def is_valid_downloadable(url: str) -> bool:
    """
    Stricter check used before handing a record to the downloader.

    Args:
        url: Candidate URL

    Returns:
        True for http(s) URLs that also look like video
    """
    if not isinstance(url, str):
        return False

    try:
        parsed = urlparse(url)
    except ValueError:
        logger.debug(f"Unparseable URL rejected: {url[:60]}")
        return False

    if parsed.scheme.lower() not in DOWNLOADABLE_SCHEMES or not parsed.netloc:
        return False

    return looks_like_video(url)


def is_embed_host(url: str, hosts: Iterable[str]) -> bool:
    """
    Check if a frame URL is served by a known video host.

    Subdomains match their parent entry (player.vimeo.com -> vimeo.com).
    """
    if not isinstance(url, str) or not url:
        return False

    try:
        host = (urlparse(url).hostname or '').lower()
    except ValueError:
        return False

    if not host:
        return False

    return any(host == site or host.endswith('.' + site) for site in hosts)
