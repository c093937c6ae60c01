"""
Bible Store.

Single entry point for the rest of the application: owns the corpus
loader handle, the book index, the chapter cache and the search engine,
and drives their lifecycle (initialize, reset, preload, close).

Public read operations translate internal errors at this boundary:
unknown books and out-of-range chapters become empty results, storage
errors are retried once, and search never raises for data problems.
"""
import asyncio
import logging
import random
import threading
from typing import Callable, Iterable, List, Optional, Tuple, Union
from models import (
    Book,
    CacheStats,
    Chapter,
    CorpusStats,
    SearchResult,
    StoreState,
    Testament,
    Verse,
    VerseReference
)
from errors import (
    BibleStoreError,
    ChapterNotFoundError,
    CorpusCorruptError,
    CorpusUnavailableError,
    StorageIOError,
    StoreClosedError,
    StoreNotReadyError,
    UnknownBookError
)
from scripture.book_index import BookIndex
from scripture.corpus_loader import CorpusLoader, CorpusHandle
from scripture.normalize import normalize_query
from scripture.search_engine import SearchEngine
from scripture.verse_cache import ChapterCache
import config

logger = logging.getLogger(__name__)

ChapterKey = Tuple[str, int]
TestamentScope = Union[Testament, str, None]

_SCOPES = {
    "all": None,
    "ot": Testament.OLD,
    "old": Testament.OLD,
    "nt": Testament.NEW,
    "new": Testament.NEW,
}


def parse_testament(scope: TestamentScope) -> Optional[Testament]:
    """Map a search scope ("all", "ot", "nt" or a Testament) to a Testament filter."""
    if scope is None or isinstance(scope, Testament):
        return scope
    key = str(scope).strip().lower()
    if key not in _SCOPES:
        raise ValueError(f"Unknown testament scope: {scope!r} (use 'all', 'ot' or 'nt')")
    return _SCOPES[key]


class BibleStore:
    """
    Lifecycle manager and read API for the bundled scripture corpus.

    One instance is created at application startup and passed to consumers.
    All reads are async; storage access and corpus scans run in a worker
    thread so the event loop is never blocked.
    """

    def __init__(
        self,
        loader: Optional[CorpusLoader] = None,
        cache: Optional[ChapterCache] = None,
        last_read_provider: Optional[Callable[[], Optional[ChapterKey]]] = None
    ):
        """
        Initialize the store (no I/O happens until initialize_bible_data).

        Args:
            loader: Corpus loader (created for config.CORPUS_DB_PATH if None)
            cache: Chapter cache (created with config.CHAPTER_CACHE_CAPACITY if None)
            last_read_provider: Callable returning the user's last-read
                (book, chapter), used for preloading
        """
        self.loader = loader or CorpusLoader()
        self.cache = cache or ChapterCache()
        self._last_read_provider = last_read_provider

        self._state = StoreState.UNINITIALIZED
        self._handle: Optional[CorpusHandle] = None
        self._index: Optional[BookIndex] = None
        self._search_engine: Optional[SearchEngine] = None
        self._lifecycle_task: Optional[asyncio.Task] = None
        # Bumped whenever the handle is installed or released; in-flight work
        # started under an older generation must not publish its results.
        self._generation = 0
        self._search_generation = 0
        self._search_cancel: Optional[threading.Event] = None

    @property
    def state(self) -> StoreState:
        return self._state

    async def __aenter__(self):
        await self.initialize_bible_data()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close_bible_database()

    # ========== LIFECYCLE ==========

    async def initialize_bible_data(self) -> None:
        """
        Open the corpus and build the index.

        Concurrent callers share the same in-flight initialization and see
        the same outcome. A no-op when already ready.

        Raises:
            CorpusUnavailableError: If the corpus asset is missing or unreadable
            CorpusCorruptError: If the asset is still corrupt after one reset attempt
        """
        if self._state == StoreState.READY:
            logger.debug("Bible data already initialized")
            return
        task = self._lifecycle_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._build(reset=False))
            self._lifecycle_task = task
        await asyncio.shield(task)

    async def reset_database(self) -> None:
        """
        Clear the cache, reopen the corpus and rebuild the index.

        Raises:
            StoreClosedError: If the store is closed
            StoreNotReadyError: If the store was never initialized
            CorpusUnavailableError / CorpusCorruptError: If rebuilding fails
        """
        task = self._lifecycle_task
        if self._state in (StoreState.INITIALIZING, StoreState.RESETTING) and task is not None:
            await asyncio.shield(task)
            return
        self._check_ready("reset_database")
        task = asyncio.ensure_future(self._build(reset=True))
        self._lifecycle_task = task
        await asyncio.shield(task)

    async def _build(self, reset: bool) -> None:
        """Shared body of initialize and reset."""
        if reset:
            self._state = StoreState.RESETTING
            logger.info("Resetting Bible database")
            self._release()
        fallback = StoreState.CLOSED if self._state == StoreState.CLOSED else StoreState.UNINITIALIZED
        self._state = StoreState.INITIALIZING
        generation = self._generation
        logger.info("Initializing Bible data")

        try:
            handle, index, engine = await self._load_with_recovery()
        except BibleStoreError:
            if generation == self._generation:
                self._state = fallback
            raise

        if generation != self._generation or self._state != StoreState.INITIALIZING:
            # Closed while we were loading
            self.loader.close(handle)
            raise StoreClosedError("initialize_bible_data")

        self._handle = handle
        self._index = index
        self._search_engine = engine
        self._generation += 1
        self._state = StoreState.READY
        logger.info(f"Bible data ready: {len(index)} books, {index.total_verses} verses")

    async def _load_with_recovery(self) -> Tuple[CorpusHandle, BookIndex, SearchEngine]:
        """Load the corpus, retrying once through a fresh open if it looks corrupt."""
        try:
            return await asyncio.to_thread(self._load_corpus)
        except CorpusCorruptError as e:
            logger.warning(f"Corpus failed validation, attempting one reset: {e}")
            self.cache.clear()
            return await asyncio.to_thread(self._load_corpus)

    def _load_corpus(self) -> Tuple[CorpusHandle, BookIndex, SearchEngine]:
        """Open the asset and build index and search target in one pass (worker thread)."""
        handle = self.loader.open()
        try:
            rows = list(self.loader.iter_verse_rows(handle))
            index = BookIndex.from_rows(
                self.loader.read_books(handle),
                rows,
                source=str(self.loader.db_path)
            )
            engine = SearchEngine(index, rows)
        except StorageIOError as e:
            self.loader.close(handle)
            raise CorpusUnavailableError(str(self.loader.db_path), e.reason) from e
        except Exception:
            self.loader.close(handle)
            raise
        return handle, index, engine

    def close_bible_database(self) -> None:
        """
        Release the corpus handle and clear the cache.

        Valid from any state; calling it again is a no-op.
        """
        if self._state == StoreState.CLOSED:
            logger.debug("Bible database already closed")
            return
        self._state = StoreState.CLOSING
        self._release()
        self._lifecycle_task = None
        self._state = StoreState.CLOSED
        logger.info("Bible database closed")

    def _release(self) -> None:
        """Drop handle, index, engine and cache; supersede any running search."""
        self._cancel_search()
        self.cache.clear()
        handle = self._handle
        self._handle = None
        self._index = None
        self._search_engine = None
        self._generation += 1
        self.loader.close(handle)

    async def preload_frequently_accessed_data(self, extra_keys: Optional[Iterable[ChapterKey]] = None) -> None:
        """
        Warm the cache with the hot set.

        Loads the first chapter of the first book, config.PRELOAD_CHAPTERS,
        the last-read position and any extra keys. Best-effort: never raises.
        """
        if self._state != StoreState.READY:
            logger.warning(f"Skipping preload: Bible store is {self._state.value}")
            return

        keys = self._preload_keys(extra_keys)

        async def fetch(book_id: str, chapter: int) -> Chapter:
            while True:
                payload, generation = await self._read_chapter(book_id, chapter)
                if self._state in (StoreState.CLOSED, StoreState.CLOSING):
                    raise StoreClosedError("preload_frequently_accessed_data")
                if generation == self._generation:
                    return payload
                # Read from a handle that a reset has since replaced
                logger.debug(f"Re-reading {book_id} {chapter} after reset")

        loaded = await self.cache.preload(keys, fetch)
        logger.info(f"Preloaded {len(loaded)} of {len(keys)} frequently accessed chapters")

    def _preload_keys(self, extra_keys: Optional[Iterable[ChapterKey]]) -> List[ChapterKey]:
        """Resolve and de-duplicate the hot set, skipping invalid references."""
        index = self._index
        candidates: List[ChapterKey] = []
        order = index.book_order()
        if order:
            candidates.append((order[0], 1))
        candidates.extend(config.PRELOAD_CHAPTERS)
        if self._last_read_provider is not None:
            try:
                last_read = self._last_read_provider()
            except Exception as e:
                logger.warning(f"Last-read provider failed: {e}")
                last_read = None
            if last_read:
                candidates.append(last_read)
        if extra_keys:
            candidates.extend(extra_keys)

        keys: List[ChapterKey] = []
        for book_id, chapter in candidates:
            if book_id not in index or not index.has_chapter(book_id, chapter):
                logger.warning(f"Ignoring invalid preload reference: {book_id} {chapter}")
                continue
            key = (index.resolve(book_id), chapter)
            if key not in keys:
                keys.append(key)
        return keys

    # ========== STATE CHECKS ==========

    def _check_ready(self, operation: str) -> None:
        if self._state in (StoreState.CLOSED, StoreState.CLOSING):
            raise StoreClosedError(operation)
        if self._state != StoreState.READY:
            raise StoreNotReadyError(operation, self._state.value)

    async def _await_ready(self, operation: str) -> None:
        """Wait for an in-flight initialize/reset, then require READY."""
        task = self._lifecycle_task
        if self._state in (StoreState.INITIALIZING, StoreState.RESETTING) and task is not None:
            await asyncio.shield(task)
        self._check_ready(operation)

    # ========== BOOKS ==========

    def get_book_chapters(self, book_id: str) -> int:
        """
        Number of chapters in a book.

        Returns:
            Chapter count, or 0 for an unknown book
        """
        self._check_ready("get_book_chapters")
        try:
            return self._index.chapter_count(book_id)
        except UnknownBookError as e:
            logger.warning(f"get_book_chapters: unknown book '{book_id}' (suggestion: {e.suggestion})")
            return 0

    def book_order(self) -> Tuple[str, ...]:
        """Book ids in canonical order."""
        self._check_ready("book_order")
        return self._index.book_order()

    def get_all_books(self, testament: TestamentScope = None) -> List[Book]:
        """Books in canonical order, optionally for one testament ("ot"/"nt")."""
        self._check_ready("get_all_books")
        return self._index.books(parse_testament(testament))

    # ========== CHAPTERS & VERSES ==========

    async def get_chapter(self, book_id: str, chapter: int) -> List[Verse]:
        """
        Get the verses of a chapter in ascending order.

        Served from the cache when possible; a miss reads storage and
        populates the cache.

        Returns:
            Verses, or an empty list for an unknown book or out-of-range chapter

        Raises:
            StoreClosedError: If the store is closed
            StorageIOError: If the read fails twice
            CorpusCorruptError: If the chapter is still corrupt after a reset
        """
        await self._await_ready("get_chapter")
        key = self._resolve_chapter(book_id, chapter)
        if key is None:
            return []

        cached = self.cache.get(key, chapter)
        if cached is not None:
            logger.debug(f"Cache hit: {key} {chapter}")
            return list(cached.verses)

        logger.debug(f"Cache miss: {key} {chapter}")
        try:
            payload, generation = await self._read_chapter(key, chapter)
        except ChapterNotFoundError as e:
            logger.warning(f"get_chapter: {e}")
            return []
        except CorpusCorruptError as e:
            logger.error(f"Corrupt chapter data for {key} {chapter}, resetting: {e}")
            await self.reset_database()
            # The rebuilt index may no longer hold this chapter
            key = self._resolve_chapter(book_id, chapter)
            if key is None:
                return []
            try:
                payload, generation = await self._read_chapter(key, chapter)
            except ChapterNotFoundError as e:
                logger.warning(f"get_chapter: {e}")
                return []

        if generation == self._generation:
            self.cache.put(key, chapter, payload)
        return list(payload.verses)

    def _resolve_chapter(self, book_id: str, chapter: int) -> Optional[str]:
        """Canonical key for a valid (book, chapter) reference, or None (logged)."""
        index = self._index
        try:
            key = index.resolve(book_id)
        except UnknownBookError as e:
            logger.warning(f"get_chapter: unknown book '{book_id}' (suggestion: {e.suggestion})")
            return None
        if not index.has_chapter(key, chapter):
            logger.warning(
                f"get_chapter: {key} {chapter} out of range (1-{index.chapter_count(key)})"
            )
            return None
        return key

    async def _read_chapter(self, book_id: str, chapter: int) -> Tuple[Chapter, int]:
        """
        Uncached read with one retry on StorageIOError.

        A read interrupted by a reset waits for the rebuild and is repeated on
        the new handle without using up a retry.

        Returns:
            The chapter and the generation of the handle it was read from
        """
        attempts = 1 + max(0, config.CHAPTER_READ_RETRIES)
        failures = 0
        while True:
            await self._await_ready("get_chapter")
            handle = self._handle
            generation = self._generation
            try:
                verses = await asyncio.to_thread(self.loader.read_chapter, handle, book_id, chapter)
                return Chapter(book_id=book_id, number=chapter, verses=tuple(verses)), generation
            except StorageIOError as e:
                if self._state in (StoreState.CLOSED, StoreState.CLOSING):
                    raise StoreClosedError("get_chapter") from e
                if generation != self._generation or self._state != StoreState.READY:
                    logger.info(f"Reading {book_id} {chapter} interrupted by a reset, retrying on the new handle")
                    continue
                failures += 1
                if failures == attempts:
                    logger.error(f"Reading {book_id} {chapter} failed after {attempts} attempts: {e.reason}")
                    raise
                logger.warning(f"Reading {book_id} {chapter} failed, retrying: {e.reason}")

    async def get_verse(self, book_id: str, chapter: int, verse: int) -> Optional[Verse]:
        """Get one verse, or None if it does not exist."""
        for item in await self.get_chapter(book_id, chapter):
            if item.number == verse:
                return item
        return None

    async def get_random_verse(self, rng: Optional[random.Random] = None) -> Optional[VerseReference]:
        """
        Pick a random verse (book, then chapter, then verse uniformly).

        Args:
            rng: Random generator (module-level random if None)
        """
        await self._await_ready("get_random_verse")
        rng = rng or random
        order = self._index.book_order()
        if not order:
            return None
        book = self._index.get_book(rng.choice(order))
        chapter = rng.randint(1, book.chapter_count)
        verses = await self.get_chapter(book.id, chapter)
        if not verses:
            return None
        picked = rng.choice(verses)
        return VerseReference(book=book.id, chapter=chapter, verse=picked.number, text=picked.text)

    # ========== SEARCH ==========

    async def search_bible(
        self,
        query: str,
        testament: TestamentScope = None,
        book_id: Optional[str] = None
    ) -> List[SearchResult]:
        """
        Search the whole corpus for verses containing the query.

        A newer call supersedes an older one: the older scan is cancelled
        and its caller receives an empty list.

        Args:
            query: Free text (case and accent insensitive, min 3 characters)
            testament: "all"/None, "ot" or "nt"
            book_id: Restrict to one book

        Returns:
            Matching verses in canonical order, capped at config.SEARCH_MAX_RESULTS
        """
        scope = parse_testament(testament)
        self._search_generation += 1
        generation = self._search_generation
        self._cancel_search()

        await self._await_ready("search_bible")
        if len(normalize_query(query)) < config.SEARCH_MIN_QUERY_LENGTH:
            return []
        if generation != self._search_generation:
            return []

        cancel_event = threading.Event()
        self._search_cancel = cancel_event
        engine = self._search_engine
        try:
            results = await asyncio.to_thread(
                engine.search, query, scope, book_id, None, cancel_event
            )
        except asyncio.CancelledError:
            cancel_event.set()
            raise
        except Exception as e:
            logger.error(f"search_bible failed for '{query}': {e}")
            return []

        if generation != self._search_generation or cancel_event.is_set():
            logger.debug(f"Discarding superseded search results for '{query}'")
            return []
        logger.info(f"Search '{query}' returned {len(results)} results")
        return results

    def _cancel_search(self) -> None:
        if self._search_cancel is not None:
            self._search_cancel.set()
            self._search_cancel = None

    # ========== STATS ==========

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def corpus_stats(self) -> CorpusStats:
        """Translation name and corpus totals."""
        self._check_ready("corpus_stats")
        index = self._index
        return CorpusStats(
            translation=self._handle.translation if self._handle else None,
            total_books=len(index),
            total_chapters=index.total_chapters,
            total_verses=index.total_verses,
            testaments=sorted({book.testament.value for book in index.books()})
        )
