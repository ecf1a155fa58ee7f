"""
Deduplicator - Video Discovery

Merges scanner output into one record list keyed by URL, first seen wins.
"""

import logging
from typing import Iterable, List

from .metadata import MetadataSynthesizer
from .models import Candidate, ElementRef, VideoRecord
from .url_classifier import classify_format

logger = logging.getLogger(__name__)


class IdCounter:
    """Monotonic record id source owned by a discovery session."""

    def __init__(self):
        self._value = 0

    def next(self) -> int:
        self._value += 1
        return self._value

    def reset(self):
        self._value = 0


def deduplicate(candidates: Iterable[Candidate], synthesizer: MetadataSynthesizer,
                counter: IdCounter) -> List[VideoRecord]:
    """
    Build records from candidates, dropping repeated URLs.

    Ids are only drawn for kept candidates, in first-seen order.

    Args:
        candidates: Candidates in scanner declaration order
        synthesizer: Metadata source for kept candidates
        counter: Session id counter

    Returns:
        Ordered list of unique records
    """
    seen = set()
    records = []
    duplicates = 0

    for candidate in candidates:
        if candidate.url in seen:
            duplicates += 1
            continue
        seen.add(candidate.url)

        element = candidate.element
        try:
            metadata = synthesizer.synthesize(element, candidate.url)
        except Exception as e:
            logger.warning(f"Metadata unavailable for {candidate.url[:60]}: {e}")
            metadata = synthesizer.fallback(candidate.url)

        records.append(VideoRecord(
            id=counter.next(),
            url=candidate.url,
            title=metadata.title,
            duration=metadata.duration,
            quality=metadata.quality,
            format=classify_format(candidate.url),
            estimated_size_bytes=metadata.estimated_size_bytes,
            source_kind=candidate.source_kind,
            element_ref=ElementRef(element, element.document.resolve_ref),
        ))

    if duplicates:
        logger.debug(f"Dropped {duplicates} duplicate candidates")

    return records
