"""
Mutation Watcher - Video Discovery

Observes structural changes under the document body and schedules one
debounced re-scan when video-relevant nodes are added.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from .config import DEBOUNCE_MS
from .document import FRAME_TAGS, PLAYABLE_TAGS, Document, Element, MutationRecord

logger = logging.getLogger(__name__)

RELEVANT_TAGS = PLAYABLE_TAGS + FRAME_TAGS


class MutationWatcher:
    """
    Mutation Watcher - Debounced Re-scan Trigger

    Holds at most one pending timer. A new relevant batch re-arms the same
    timer instead of scheduling another re-scan.
    """

    def __init__(self, document: Document, on_refresh: Callable[[], Awaitable],
                 debounce: Optional[float] = None):
        """
        Initialize watcher.

        Args:
            document: Document to observe
            on_refresh: Coroutine function run when the timer fires
            debounce: Delay in seconds (defaults to DEBOUNCE_MS)
        """
        self.document = document
        self.on_refresh = on_refresh
        self.debounce = DEBOUNCE_MS / 1000 if debounce is None else debounce
        self.running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """Whether a re-scan is armed and waiting."""
        return self._timer is not None

    def start(self):
        """Start observing the body subtree. Must be called from the event loop."""
        if self.running:
            return

        self._loop = asyncio.get_running_loop()
        self.document.observe(self._on_mutations, root=self.document.body, subtree=True)
        self.running = True
        logger.info(f"Mutation watcher started (debounce={self.debounce * 1000:.0f}ms)")

    def stop(self):
        """Disconnect from the document and drop any pending re-scan."""
        self.cancel_pending()
        if self.running:
            self.document.disconnect(self._on_mutations)
            self.running = False
            logger.info("Mutation watcher stopped")

    def cancel_pending(self):
        """Drop the armed timer and any fired re-scan that has not finished."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Pending re-scan cancelled")

        for task in list(self._tasks):
            if not task.done():
                task.cancel()
                logger.debug("In-flight re-scan cancelled")

    @staticmethod
    def is_relevant(element: Element) -> bool:
        """Added node is, or contains, playable media or a frame embed."""
        return element.is_playable or element.is_frame or element.contains_any(RELEVANT_TAGS)

    def _on_mutations(self, records: List[MutationRecord]):
        should_refresh = any(
            self.is_relevant(node)
            for record in records
            for node in record.added_nodes
        )

        if should_refresh:
            self._arm()

    def _arm(self):
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("Re-scan timer re-armed")
        self._timer = self._loop.call_later(self.debounce, self._fire)

    def _fire(self):
        self._timer = None
        logger.debug("Debounce elapsed, triggering re-scan")
        task = self._loop.create_task(self.on_refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
