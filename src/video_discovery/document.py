"""
Document - Video Discovery

Live document tree over BeautifulSoup.
Wraps parsed markup in capability-aware elements and reports structural
changes to observers in mutation batches.
"""

import logging
import math
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Doctype, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

PARSER = 'html.parser'

PLAYABLE_TAGS = ('video',)
FRAME_TAGS = ('iframe', 'embed')
SOURCE_BEARING_TAGS = ('video', 'audio', 'source', 'iframe', 'embed', 'img', 'track')

# Snapshot attributes written by the page loader for runtime-only state
SNAPSHOT_WIDTH = 'data-video-width'
SNAPSHOT_HEIGHT = 'data-video-height'
SNAPSHOT_DURATION = 'data-duration'
SNAPSHOT_BACKGROUND = 'data-computed-bg'

STYLE_RULE_PATTERN = re.compile(r'([^{}]+)\{([^{}]*)\}')
BACKGROUND_DECL_PATTERN = re.compile(
    r'background(?:-image)?\s*:\s*([^;]*url\([^)]*\)[^;]*)', re.IGNORECASE
)


def _parse_number(value) -> Optional[float]:
    """Parse a numeric attribute, returning None for anything non-numeric."""
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_background_declaration(style: str) -> Optional[str]:
    """
    Pull the background image value out of a CSS declaration block.

    Args:
        style: Declaration block, e.g. the contents of a style attribute

    Returns:
        Value of the last background/background-image declaration with a url()
    """
    if not style:
        return None
    matches = BACKGROUND_DECL_PATTERN.findall(style)
    if not matches:
        return None
    return matches[-1].strip()


class Element:
    """
    Capability-aware wrapper around a BeautifulSoup tag.

    Scanners check capabilities (intrinsic dimensions, duration, resource
    locator, nested sources) rather than concrete tag names. Runtime media
    state (``video_width``, ``video_height``, ``duration``) is not part of
    markup; it is seeded from snapshot attributes and may be set directly.
    """

    def __init__(self, document: 'Document', tag: Tag):
        self.document = document
        self.tag = tag
        self.video_width = _parse_number(tag.get(SNAPSHOT_WIDTH))
        self.video_height = _parse_number(tag.get(SNAPSHOT_HEIGHT))
        self.duration = _parse_number(tag.get(SNAPSHOT_DURATION))

    @property
    def name(self) -> str:
        return self.tag.name

    @property
    def has_intrinsic_dimensions(self) -> bool:
        return self.name in PLAYABLE_TAGS

    @property
    def has_duration(self) -> bool:
        return self.name in PLAYABLE_TAGS

    @property
    def has_resource_locator(self) -> bool:
        return self.name in SOURCE_BEARING_TAGS

    @property
    def has_nested_sources(self) -> bool:
        return self.name in PLAYABLE_TAGS

    @property
    def is_playable(self) -> bool:
        return self.has_duration and self.has_intrinsic_dimensions

    @property
    def is_frame(self) -> bool:
        return self.name in FRAME_TAGS

    def attr(self, name: str) -> str:
        """Attribute value as a string ('' when absent)."""
        value = self.tag.get(name)
        if value is None:
            return ''
        if isinstance(value, list):
            return ' '.join(value)
        return str(value)

    @property
    def resolved_src(self) -> str:
        """The ``src`` attribute resolved against the document base URL."""
        return self.document.resolve_url(self.attr('src'))

    @property
    def finite_duration(self) -> Optional[float]:
        """Duration in seconds if known, positive and finite."""
        duration = self.duration
        if duration is None or not isinstance(duration, (int, float)):
            return None
        if math.isnan(duration) or math.isinf(duration) or duration <= 0:
            return None
        return float(duration)

    def dimensions(self) -> Tuple[int, int]:
        """
        Pixel dimensions, preferring intrinsic size over layout attributes.

        Returns:
            (width, height), zeros when unknown
        """
        width = self.video_width or _parse_number(self.tag.get('width')) or 0
        height = self.video_height or _parse_number(self.tag.get('height')) or 0
        return int(width), int(height)

    def nested_sources(self) -> List['Element']:
        if not self.has_nested_sources:
            return []
        return [self.document.wrap(tag) for tag in self.tag.find_all('source')]

    def computed_style(self, prop: str) -> Optional[str]:
        """
        Resolved value of a style property.

        Only ``background-image`` takes stylesheets into account; other
        properties come from the inline style attribute.
        """
        prop = prop.lower()
        if prop == 'background-image':
            snapshot = self.tag.get(SNAPSHOT_BACKGROUND)
            if snapshot:
                return snapshot
            inline = extract_background_declaration(self.attr('style'))
            if inline:
                return inline
            return self.document.stylesheet_background(self.tag)

        for declaration in self.attr('style').split(';'):
            name, _, value = declaration.partition(':')
            if name.strip().lower() == prop:
                return value.strip()
        return None

    def closest(self, *names: str) -> Optional['Element']:
        """Nearest inclusive ancestor with one of the given tag names."""
        node = self.tag
        while isinstance(node, Tag) and node is not self.document.soup:
            if node.name in names:
                return self.document.wrap(node)
            node = node.parent
        return None

    def select_one(self, selector: str) -> Optional['Element']:
        found = self.tag.select_one(selector)
        return self.document.wrap(found) if found is not None else None

    def contains_any(self, names) -> bool:
        return self.tag.find(list(names)) is not None

    @property
    def text(self) -> str:
        return self.tag.get_text(' ', strip=True)

    def __repr__(self):
        return f"<Element {self.name}>"


@dataclass
class MutationRecord:
    """One structural or attribute change to the document."""
    type: str
    target: Element
    added_nodes: List[Element] = field(default_factory=list)
    removed_nodes: List[Element] = field(default_factory=list)
    attribute_name: Optional[str] = None


MutationCallback = Callable[[List[MutationRecord]], None]


class Document:
    """
    Live document over a BeautifulSoup tree.

    Mutations go through ``append_html``, ``remove`` and ``set_attribute`` so
    observers get notified. Each mutation is delivered as its own batch unless
    it happens inside ``with document.batch():``.
    """

    def __init__(self, soup: BeautifulSoup, url: Optional[str] = None):
        self.soup = soup
        self.url = url
        self._ensure_body()
        self._wrappers: Dict[int, Element] = {}
        self._observers: List[Tuple[MutationCallback, Tag, bool]] = []
        self._pending: Optional[List[MutationRecord]] = None
        self._batch_depth = 0
        self._stylesheet_cache: Optional[Dict[int, str]] = None

    @classmethod
    def from_html(cls, markup: str, url: Optional[str] = None) -> 'Document':
        """
        Parse markup into a document.

        Args:
            markup: HTML source
            url: URL the markup was loaded from, used to resolve relative links

        Returns:
            Document instance
        """
        return cls(BeautifulSoup(markup or '', PARSER), url=url)

    def _ensure_body(self):
        """Give fragments an html/head/body skeleton like a browser would."""
        if self.soup.body is not None:
            return

        html = self.soup.html
        if html is None:
            html = self.soup.new_tag('html')
            for node in list(self.soup.contents):
                if isinstance(node, Doctype):
                    continue
                html.append(node.extract())
            self.soup.append(html)

        head = html.find('head', recursive=False)
        body = self.soup.new_tag('body')
        for node in list(html.contents):
            if node is head:
                continue
            if isinstance(node, Tag) and node.name in ('title', 'meta', 'base', 'link'):
                if head is None:
                    head = self.soup.new_tag('head')
                    html.insert(0, head)
                head.append(node.extract())
                continue
            body.append(node.extract())
        html.append(body)

    # --- Queries ---

    def wrap(self, tag: Tag) -> Element:
        """Return the stable wrapper for a tag."""
        key = id(tag)
        element = self._wrappers.get(key)
        if element is None or element.tag is not tag:
            element = Element(self, tag)
            self._wrappers[key] = element
        return element

    @property
    def body(self) -> Element:
        return self.wrap(self.soup.body)

    @property
    def title(self) -> str:
        if self.soup.title is None:
            return ''
        return self.soup.title.get_text(strip=True)

    @property
    def base_url(self) -> Optional[str]:
        base = self.soup.find('base', href=True)
        if base is not None:
            return urljoin(self.url or '', base['href'])
        return self.url

    def resolve_url(self, value: str) -> str:
        """Resolve a possibly-relative locator the way the browser's ``.src`` does."""
        value = (value or '').strip()
        if not value:
            return ''
        base = self.base_url
        if not base:
            return value
        try:
            return urljoin(base, value)
        except ValueError:
            return value

    def select(self, selector: str) -> List[Element]:
        return [self.wrap(tag) for tag in self.soup.select(selector)]

    def iter_elements(self) -> Iterator[Element]:
        for tag in self.soup.find_all(True):
            yield self.wrap(tag)

    def serialize(self) -> str:
        """Full serialized markup (the document element's outer HTML)."""
        return str(self.soup)

    def contains(self, element: Element) -> bool:
        """Whether the element is still attached to this document."""
        tag = element.tag
        if tag is self.soup:
            return True
        return any(parent is self.soup for parent in tag.parents)

    def resolve_ref(self, element: Element) -> Optional[Element]:
        return element if self.contains(element) else None

    def stylesheet_background(self, tag: Tag) -> Optional[str]:
        """Background image applied to a tag by ``<style>`` rules, if any."""
        if self._stylesheet_cache is None:
            self._stylesheet_cache = self._build_stylesheet_cache()
        return self._stylesheet_cache.get(id(tag))

    def _build_stylesheet_cache(self) -> Dict[int, str]:
        backgrounds: Dict[int, str] = {}
        for style in self.soup.find_all('style'):
            for selectors, declarations in STYLE_RULE_PATTERN.findall(style.get_text()):
                value = extract_background_declaration(declarations)
                if not value:
                    continue
                selectors = selectors.strip()
                if selectors.startswith('@'):
                    continue
                try:
                    matched = self.soup.select(selectors)
                except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
                    logger.debug(f"Skipping unsupported selector {selectors[:40]!r}: {e}")
                    continue
                for tag in matched:
                    backgrounds[id(tag)] = value
        return backgrounds

    # --- Mutations ---

    def observe(self, callback: MutationCallback, root: Optional[Element] = None,
                subtree: bool = True):
        """
        Register a mutation observer.

        Args:
            callback: Called with a list of MutationRecords per batch
            root: Element to observe (defaults to body)
            subtree: Also report changes below root
        """
        root_tag = (root or self.body).tag
        self._observers.append((callback, root_tag, subtree))

    def disconnect(self, callback: MutationCallback):
        self._observers = [obs for obs in self._observers if obs[0] != callback]

    @contextmanager
    def batch(self):
        """Group every mutation inside the block into one delivered batch."""
        if self._batch_depth == 0:
            self._pending = []
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                records, self._pending = self._pending, None
                self._deliver(records)

    def append_html(self, parent: Element, markup: str) -> List[Element]:
        """
        Parse a fragment and append its nodes to ``parent``.

        Returns:
            Element wrappers for the added top-level tags
        """
        fragment = BeautifulSoup(markup, PARSER)
        added = []
        for node in list(fragment.contents):
            node = node.extract()
            parent.tag.append(node)
            if isinstance(node, Tag):
                added.append(self.wrap(node))
        self._record(MutationRecord(type='childList', target=parent, added_nodes=added))
        return added

    def remove(self, element: Element):
        parent_tag = element.tag.parent
        element.tag.extract()
        for tag in [element.tag] + element.tag.find_all(True):
            self._wrappers.pop(id(tag), None)
        if parent_tag is not None:
            self._record(MutationRecord(
                type='childList', target=self.wrap(parent_tag), removed_nodes=[element]
            ))

    def set_attribute(self, element: Element, name: str, value: str):
        element.tag[name] = value
        self._record(MutationRecord(type='attributes', target=element, attribute_name=name))

    def _record(self, record: MutationRecord):
        self._stylesheet_cache = None
        if self._pending is not None:
            self._pending.append(record)
        else:
            self._deliver([record])

    def _deliver(self, records: List[MutationRecord]):
        if not records:
            return
        for callback, root_tag, subtree in list(self._observers):
            visible = [r for r in records if self._in_scope(r.target.tag, root_tag, subtree)]
            if visible:
                callback(visible)

    @staticmethod
    def _in_scope(target: Tag, root: Tag, subtree: bool) -> bool:
        if target is root:
            return True
        if not subtree:
            return False
        return any(parent is root for parent in target.parents)
