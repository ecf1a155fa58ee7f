"""
Discovery Session - Video Discovery

Owns the result set and id counter for one document view, runs scans one at
a time and keeps the mutation watcher's lifecycle.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from .deduplicator import IdCounter, deduplicate
from .document import Document
from .metadata import MetadataSynthesizer
from .models import VideoRecord
from .scanners import SCANNERS, run_scanner
from .watcher import MutationWatcher

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = 'idle'
    SCANNING = 'scanning'


Subscriber = Callable[[List[VideoRecord]], None]


class DiscoverySession:
    """
    Discovery Session - Scan Orchestration

    Scans are serialized on a lock: a request arriving while one is in flight
    waits and runs afterwards. The result list is replaced in one assignment
    once a scan completes, so readers never see a partial list.
    """

    def __init__(self, document: Document, synthesizer: MetadataSynthesizer = None,
                 debounce: Optional[float] = None, watch: bool = True, scanners=SCANNERS):
        """
        Initialize session.

        Args:
            document: Live document to scan
            synthesizer: Metadata synthesizer (default instance if None)
            debounce: Mutation debounce in seconds (config default if None)
            watch: Re-scan automatically on relevant mutations
            scanners: Ordered (name, scanner) pairs
        """
        self.document = document
        self.synthesizer = synthesizer or MetadataSynthesizer()
        self.scanners = scanners
        self.state = SessionState.IDLE
        self.scan_count = 0
        self._videos: List[VideoRecord] = []
        self._counter = IdCounter()
        self._lock = asyncio.Lock()
        self._subscribers: List[Subscriber] = []
        self.watcher = MutationWatcher(document, self._on_mutation, debounce) if watch else None

    def get_current_videos(self) -> List[VideoRecord]:
        """Last completed result set. Never blocks, never raises."""
        return list(self._videos)

    def export(self) -> List[Dict]:
        """Transport payloads for the download orchestrator."""
        return [video.to_dict() for video in self._videos]

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback run with the new result list after every scan.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def start_detection(self) -> List[VideoRecord]:
        """Run a scan and start watching for mutations."""
        if self.watcher is not None and not self.watcher.running:
            self.watcher.start()

        async with self._lock:
            return await self._scan('start')

    async def refresh(self) -> List[VideoRecord]:
        """Reset ids and results, then rescan. Supersedes any pending re-scan."""
        if self.watcher is not None:
            self.watcher.cancel_pending()

        async with self._lock:
            self._clear()
            return await self._scan('refresh')

    async def reset(self):
        """Clear results and restart ids without scanning."""
        if self.watcher is not None:
            self.watcher.cancel_pending()

        async with self._lock:
            self._clear()

    async def teardown(self):
        """Stop watching the document and drop all session state."""
        if self.watcher is not None:
            self.watcher.stop()

        async with self._lock:
            self._clear()
            self._subscribers.clear()

        logger.info("Discovery session torn down")

    def _clear(self):
        self._counter.reset()
        self._videos = []

    async def _on_mutation(self):
        async with self._lock:
            await self._scan('mutation')

    async def _scan(self, reason: str) -> List[VideoRecord]:
        """Run every scanner and swap in the new result set. Caller holds the lock."""
        self.state = SessionState.SCANNING
        logger.debug(f"Scan started ({reason})")

        try:
            candidates = []
            for name, scanner in self.scanners:
                candidates.extend(run_scanner(name, scanner, self.document))
                # Let the loop breathe between passes on large documents
                await asyncio.sleep(0)

            videos = deduplicate(candidates, self.synthesizer, self._counter)
            self._videos = videos
            self.scan_count += 1
        except Exception as e:
            logger.error(f"Scan failed ({reason}), keeping previous results: {e}", exc_info=True)
            return self.get_current_videos()
        finally:
            self.state = SessionState.IDLE

        logger.info(f"Scan complete ({reason}): {len(videos)} videos from {len(candidates)} candidates")
        self._notify(videos)
        return list(videos)

    def _notify(self, videos: List[VideoRecord]):
        for callback in list(self._subscribers):
            try:
                callback(list(videos))
            except Exception as e:
                logger.warning(f"Subscriber failed: {e}", exc_info=True)
