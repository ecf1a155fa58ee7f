"""
Models - Video Discovery

Records produced by the discovery engine and the candidates they are built from.
"""

import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


UNKNOWN_DURATION = 'Unknown'
AUTO_QUALITY = 'Auto'
DEFAULT_FORMAT = 'mp4'


class SourceKind:
    """Which scanner produced a candidate."""
    ELEMENT = 'element'
    NESTED_SOURCE = 'nested-source'
    EMBED = 'embed'
    BACKGROUND = 'background'
    HLS_MANIFEST = 'hls-manifest'
    DASH_MANIFEST = 'dash-manifest'

    ALL = (ELEMENT, NESTED_SOURCE, EMBED, BACKGROUND, HLS_MANIFEST, DASH_MANIFEST)


class ElementRef:
    """
    Non-owning back-reference to the node a record was detected on.

    Holds a weak reference plus a re-resolution callable. The node may be gone
    or detached by the time it is resolved; callers must handle ``None``.
    """

    def __init__(self, element: Any, resolver: Optional[Callable[[Any], Any]] = None):
        self._ref = weakref.ref(element)
        self._resolver = resolver

    def resolve(self) -> Optional[Any]:
        """
        Return the originating element if it is still part of its document.

        Returns:
            Element, or None if it was collected or removed
        """
        element = self._ref()
        if element is None:
            return None
        if self._resolver is not None:
            return self._resolver(element)
        return element

    def __repr__(self):
        return f"<ElementRef alive={self._ref() is not None}>"


@dataclass
class Candidate:
    """Unvalidated detection produced by one scanner."""
    element: Any
    url: str
    source_kind: str


@dataclass
class VideoRecord:
    """
    A detected video resource.

    ``estimated_size_bytes`` is a rough bitrate-based guess for native media
    only, never a measured size. ``element_ref`` stays inside the process and
    is dropped from ``to_dict()``.
    """
    id: int
    url: str
    title: str
    duration: str = UNKNOWN_DURATION
    quality: str = AUTO_QUALITY
    format: str = DEFAULT_FORMAT
    estimated_size_bytes: Optional[int] = None
    source_kind: str = SourceKind.ELEMENT
    element_ref: Optional[ElementRef] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict:
        """
        Transport form handed to the download orchestrator.

        Returns:
            Dictionary without the element back-reference
        """
        return {
            'id': self.id,
            'url': self.url,
            'title': self.title,
            'format': self.format,
            'quality': self.quality,
            'duration': self.duration,
            'estimated_size_bytes': self.estimated_size_bytes,
        }

    @property
    def size_label(self) -> str:
        """Human readable estimated size, e.g. '74.8 MB'."""
        return format_size(self.estimated_size_bytes)


def format_size(size_bytes: Optional[int]) -> str:
    """Format a byte count with binary units."""
    if not size_bytes:
        return 'Unknown size'

    units = ['B', 'KB', 'MB', 'GB']
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.1f} {units[unit_index]}"
