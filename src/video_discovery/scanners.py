"""
Source Scanners - Video Discovery

Five independent passes over the document, each producing raw candidates.
A failing scanner contributes zero candidates instead of aborting the scan.
"""

import html
import logging
import re
from typing import Callable, List, Tuple

from .config import BACKGROUND_SCAN_LIMIT, EMBED_HOSTS
from .document import Document
from .models import Candidate, SourceKind
from .url_classifier import is_embed_host, looks_like_video

logger = logging.getLogger(__name__)

CSS_URL_PATTERN = re.compile(r'url\(["\']?([^"\')]+)["\']?\)')
HLS_PATTERN = re.compile(r'https?://[^\s"\'<>]+\.m3u8[^\s"\'<>]*')
DASH_PATTERN = re.compile(r'https?://[^\s"\'<>]+\.mpd[^\s"\'<>]*')

Scanner = Callable[[Document], List[Candidate]]


def _is_usable_src(url: str) -> bool:
    return bool(url) and not url.startswith('blob:')


def scan_native_media(document: Document) -> List[Candidate]:
    """
    Playable media elements and their nested <source> declarations.

    Element locators come first, then nested sources, so an element's own
    src wins over an identical nested one during deduplication.
    """
    playable = [element for element in document.iter_elements() if element.is_playable]

    candidates = []
    for element in playable:
        if element.has_resource_locator:
            url = element.resolved_src
            if _is_usable_src(url):
                candidates.append(Candidate(element, url, SourceKind.ELEMENT))

    for element in playable:
        for source in element.nested_sources():
            url = source.resolved_src
            if _is_usable_src(url):
                # Anchored to the owning media element for metadata
                candidates.append(Candidate(element, url, SourceKind.NESTED_SOURCE))

    return candidates


def scan_embeds(document: Document, hosts=None) -> List[Candidate]:
    """Frame embeds served by a known video host."""
    hosts = EMBED_HOSTS if hosts is None else hosts
    candidates = []

    for element in document.iter_elements():
        if not element.is_frame:
            continue
        url = element.resolved_src
        if is_embed_host(url, hosts):
            candidates.append(Candidate(element, url, SourceKind.EMBED))

    return candidates


def extract_css_url(value: str) -> str:
    """First url(...) argument of a CSS value, '' if none."""
    if not value or 'url(' not in value:
        return ''
    match = CSS_URL_PATTERN.search(value)
    return match.group(1).strip() if match else ''


def scan_background_media(document: Document, limit: int = None) -> List[Candidate]:
    """
    Elements whose computed background image references a video URL.

    Args:
        document: Document to scan
        limit: Maximum number of elements inspected (0 = unbounded)
    """
    limit = BACKGROUND_SCAN_LIMIT if limit is None else limit
    candidates = []

    for index, element in enumerate(document.iter_elements()):
        if limit and index >= limit:
            logger.debug(f"Background scan stopped at {limit} elements")
            break

        url = extract_css_url(element.computed_style('background-image'))
        if not url:
            continue

        url = document.resolve_url(url)
        if looks_like_video(url):
            candidates.append(Candidate(element, url, SourceKind.BACKGROUND))

    return candidates


def _scan_markup(document: Document, pattern, source_kind: str) -> List[Candidate]:
    markup = document.serialize()
    body = document.body
    return [
        Candidate(body, html.unescape(match), source_kind)
        for match in pattern.findall(markup)
    ]


def scan_hls_manifests(document: Document) -> List[Candidate]:
    """Absolute .m3u8 URLs anywhere in the serialized markup."""
    return _scan_markup(document, HLS_PATTERN, SourceKind.HLS_MANIFEST)


def scan_dash_manifests(document: Document) -> List[Candidate]:
    """Absolute .mpd URLs anywhere in the serialized markup."""
    return _scan_markup(document, DASH_PATTERN, SourceKind.DASH_MANIFEST)


# Declaration order is the deduplication priority order
SCANNERS: Tuple[Tuple[str, Scanner], ...] = (
    ('native', scan_native_media),
    ('embed', scan_embeds),
    ('background', scan_background_media),
    ('hls', scan_hls_manifests),
    ('dash', scan_dash_manifests),
)


def run_scanner(name: str, scanner: Scanner, document: Document) -> List[Candidate]:
    """
    Run one scanner, degrading any failure to zero candidates.

    Returns:
        Candidates from the scanner, or [] if it raised
    """
    try:
        candidates = scanner(document)
    except Exception as e:
        logger.warning(f"Scanner '{name}' failed, skipping: {e}", exc_info=True)
        return []

    logger.debug(f"Scanner '{name}' found {len(candidates)} candidates")
    return candidates


def run_scanners(document: Document, scanners=SCANNERS) -> List[Candidate]:
    """Run every scanner in declaration order and concatenate the results."""
    candidates = []
    for name, scanner in scanners:
        candidates.extend(run_scanner(name, scanner, document))
    return candidates
