"""
Metadata Synthesizer - Video Discovery

Derives title, duration, quality and an estimated byte size for a detected
element without loading the media itself.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .config import TITLE_MAX_LENGTH
from .document import Element
from .models import AUTO_QUALITY, UNKNOWN_DURATION

logger = logging.getLogger(__name__)

TITLE_ATTRIBUTES = ('title', 'alt', 'data-title')
TITLE_CONTAINERS = ('figure', 'div', 'section')
TITLE_SELECTOR = 'h1, h2, h3, h4, h5, h6, .title, [class*="title"]'
ELLIPSIS = '...'

# (minimum height, label), checked top-down
QUALITY_THRESHOLDS = (
    (2160, '4K'),
    (1440, '1440p'),
    (1080, '1080p'),
    (720, '720p'),
    (480, '480p'),
)

# Assumed bitrates (bits per second) per quality tier
BITRATE_ESTIMATES = {
    '4K': 25_000_000,
    '1440p': 16_000_000,
    '1080p': 8_000_000,
    '720p': 5_000_000,
    '480p': 2_500_000,
    AUTO_QUALITY: 5_000_000,
}
DEFAULT_ESTIMATE_DURATION = 60  # Seconds, when duration is unknown


@dataclass
class Metadata:
    """Partial record derived for one candidate."""
    title: str
    duration: str
    quality: str
    estimated_size_bytes: Optional[int]


class MetadataSynthesizer:
    """
    Metadata Synthesizer - Attribute and Heuristic Inspection

    Every field is best effort. Size is a bitrate-table estimate and must not
    be presented as the real file size.
    """

    def __init__(self, title_max_length: int = TITLE_MAX_LENGTH):
        """
        Initialize synthesizer.

        Args:
            title_max_length: Characters kept before the ellipsis marker
        """
        self.title_max_length = title_max_length

    def synthesize(self, element: Element, url: str) -> Metadata:
        """
        Derive all metadata for an element.

        Args:
            element: Originating element
            url: Resolved resource URL

        Returns:
            Metadata for the record
        """
        return Metadata(
            title=self.title(element, url),
            duration=self.duration(element),
            quality=self.quality(element),
            estimated_size_bytes=self.estimate_size(element),
        )

    def fallback(self, url: str) -> Metadata:
        """Metadata for a candidate whose element could not be inspected."""
        return Metadata(
            title=self._truncate((url or '').split('/')[-1].split('?')[0]),
            duration=UNKNOWN_DURATION,
            quality=AUTO_QUALITY,
            estimated_size_bytes=None,
        )

    def title(self, element: Element, url: str) -> str:
        """
        Resolve a human label for the video.

        Order: element attributes, nearby heading, document title, URL filename.
        """
        title = ''

        for name in TITLE_ATTRIBUTES:
            title = element.attr(name).strip()
            if title:
                break

        if not title:
            container = element.closest(*TITLE_CONTAINERS)
            if container is not None:
                heading = container.select_one(TITLE_SELECTOR)
                if heading is not None:
                    title = heading.text

        if not title:
            title = element.document.title

        if not title:
            title = (url or '').split('/')[-1].split('?')[0]

        return self._truncate(title)

    def _truncate(self, title: str) -> str:
        if len(title) > self.title_max_length:
            return title[:self.title_max_length] + ELLIPSIS
        return title

    def duration(self, element: Element) -> str:
        """Format duration as M:SS, or 'Unknown' when not a finite number."""
        if not element.has_duration:
            return UNKNOWN_DURATION

        seconds = element.finite_duration
        if seconds is None:
            return UNKNOWN_DURATION

        minutes = int(seconds // 60)
        remainder = int(seconds % 60)
        return f"{minutes}:{remainder:02d}"

    def quality(self, element: Element) -> str:
        """Quality label from pixel dimensions, 'Auto' when none are known."""
        if not element.has_intrinsic_dimensions:
            return AUTO_QUALITY

        try:
            width, height = element.dimensions()
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug(f"Unreadable dimensions on {element!r}: {e}")
            return AUTO_QUALITY

        if not width or not height:
            return AUTO_QUALITY

        for minimum, label in QUALITY_THRESHOLDS:
            if height >= minimum:
                return label

        return f"{width}x{height}"

    def estimate_size(self, element: Element) -> Optional[int]:
        """
        Rough byte size: assumed bitrate x duration / 8.

        Only native playable elements get an estimate. The result is a guess
        based on a fixed bitrate table, never a measured size.

        Returns:
            Estimated bytes, or None when not computable
        """
        if not element.is_playable:
            return None

        seconds = element.finite_duration or DEFAULT_ESTIMATE_DURATION
        bitrate = BITRATE_ESTIMATES.get(self.quality(element), BITRATE_ESTIMATES[AUTO_QUALITY])

        return math.floor(bitrate * seconds / 8)
