"""
Full-corpus verse search.

Case- and diacritic-insensitive substring search over every verse. The
folded text of each verse is computed once when the engine is built; each
query is a linear scan in canonical (book, chapter, verse) order, stopped
early by the result cap or a cancellation event.
"""
import logging
import threading
import time
from typing import Iterable, List, NamedTuple, Optional
from models import SearchResult, Testament, VerseRow
from scripture.book_index import BookIndex
from scripture.normalize import normalize_book_id, normalize_query
import config

logger = logging.getLogger(__name__)


class _SearchEntry(NamedTuple):
    ordinal: int
    chapter: int
    verse: int
    book_id: str
    testament: Testament
    text: str
    folded: str


class SearchEngine:
    """Substring search over the whole corpus."""

    def __init__(self, index: BookIndex, rows: Iterable[VerseRow]):
        """
        Build the scan target.

        Args:
            index: Book index providing ordinals and testaments
            rows: Every verse row of the corpus
        """
        entries = []
        for row in rows:
            book = index.get_book(row.book_id)
            entries.append(_SearchEntry(
                ordinal=book.ordinal,
                chapter=row.chapter,
                verse=row.verse,
                book_id=book.id,
                testament=book.testament,
                text=row.text,
                folded=normalize_query(row.text)
            ))
        entries.sort()
        self._entries = tuple(entries)
        logger.debug(f"Search engine ready with {len(self._entries)} verses")

    def __len__(self) -> int:
        return len(self._entries)

    def search(
        self,
        query: str,
        testament: Optional[Testament] = None,
        book_id: Optional[str] = None,
        limit: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[SearchResult]:
        """
        Find verses containing the query.

        Args:
            query: Free text; trimmed and folded before matching
            testament: Restrict to one testament (None = whole corpus)
            book_id: Restrict to one book (None = every book)
            limit: Maximum results (defaults to config.SEARCH_MAX_RESULTS)
            cancel_event: When set, the scan stops and returns no results

        Returns:
            SearchResults in canonical order; empty for short queries,
            cancelled scans or internal failures
        """
        needle = normalize_query(query)
        if len(needle) < config.SEARCH_MIN_QUERY_LENGTH:
            logger.debug(f"Query too short, skipping scan: '{query}'")
            return []

        limit = config.SEARCH_MAX_RESULTS if limit is None else limit
        book_key = normalize_book_id(book_id) if book_id else None
        interval = config.SEARCH_CANCEL_CHECK_INTERVAL
        started = time.perf_counter()
        results: List[SearchResult] = []
        try:
            for position, entry in enumerate(self._entries):
                if cancel_event is not None and position % interval == 0 and cancel_event.is_set():
                    logger.debug(f"Search cancelled: '{query}'")
                    return []
                if testament is not None and entry.testament != testament:
                    continue
                if book_key is not None and entry.book_id != book_key:
                    continue
                if needle in entry.folded:
                    results.append(SearchResult(
                        book=entry.book_id,
                        chapter=entry.chapter,
                        verse=entry.verse,
                        text=entry.text
                    ))
                    if len(results) >= limit:
                        break
        except Exception as e:
            logger.error(f"Search failed for '{query}': {e}")
            return []

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Search '{query}' matched {len(results)} verses in {elapsed_ms:.1f} ms")
        return results
