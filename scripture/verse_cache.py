"""
Chapter cache.

Fixed-capacity, memory-only LRU cache of chapter payloads keyed by
(book id, chapter number). Capacity counts chapters, not bytes.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple
from models import CacheEntry, CacheStats, Chapter
import config

logger = logging.getLogger(__name__)

ChapterKey = Tuple[str, int]


class ChapterCache:
    """LRU cache of chapters with hit/miss/eviction counters."""

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity if capacity is not None else config.CHAPTER_CACHE_CAPACITY
        if self.capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {self.capacity}")
        self._entries: "OrderedDict[ChapterKey, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: ChapterKey) -> bool:
        # Membership test only: does not refresh recency
        return key in self._entries

    def get(self, book_id: str, chapter: int) -> Optional[Chapter]:
        """Return the cached chapter and mark it most recently used."""
        key = (book_id, chapter)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            entry.last_accessed = time.monotonic()
            entry.access_count += 1
            self._hits += 1
            return entry.chapter

    def put(self, book_id: str, chapter: int, payload: Chapter) -> None:
        """Insert or replace an entry, evicting the least recently used one if full."""
        key = (book_id, chapter)
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                entry = self._entries[key]
                entry.chapter = payload
                entry.last_accessed = time.monotonic()
                return
            while len(self._entries) >= self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted chapter {evicted[0]} {evicted[1]} from cache")
            self._entries[key] = CacheEntry(chapter=payload, last_accessed=time.monotonic())

    async def preload(
        self,
        keys: Iterable[ChapterKey],
        fetch: Callable[[str, int], Awaitable[Chapter]]
    ) -> List[ChapterKey]:
        """
        Eagerly load chapters into the cache.

        Keys already cached are skipped. A failure on one key is logged and
        does not stop the others.

        Args:
            keys: (book id, chapter) pairs
            fetch: Coroutine function reading a chapter from storage

        Returns:
            Keys that were loaded by this call
        """
        loaded: List[ChapterKey] = []
        for book_id, chapter in keys:
            if (book_id, chapter) in self._entries:
                continue
            try:
                payload = await fetch(book_id, chapter)
            except Exception as e:
                logger.warning(f"Could not preload {book_id} {chapter}: {e}")
                continue
            self.put(book_id, chapter, payload)
            loaded.append((book_id, chapter))
        logger.debug(f"Preloaded {len(loaded)} chapters")
        return loaded

    def clear(self) -> None:
        """Drop all entries. Counters are kept."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                capacity=self.capacity,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions
            )
