"""
Book/Chapter Index.

Immutable in-memory catalog built once from the corpus: canonical book
order, chapter count per book and verse count per chapter. Lookups accept
denormalized identifiers ("1 Samuel", "1-samuel") and resolve them to the
canonical key.
"""
import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple, Any
from rapidfuzz import process, fuzz
from models import Book, Testament, VerseRow
from errors import UnknownBookError, ChapterNotFoundError, CorpusCorruptError
from scripture.normalize import normalize_book_id
import config

logger = logging.getLogger(__name__)


def _canonical_id(book_id: str, source: str) -> str:
    """Return book_id if it is already a canonical key, else raise CorpusCorruptError."""
    key = normalize_book_id(book_id)
    if key != book_id:
        raise CorpusCorruptError(source, f"book id '{book_id}' is not a canonical key (expected '{key}')")
    return key


class BookIndex:
    """
    Read-only catalog of books, chapters and verse counts.

    Built once with BookIndex.from_rows(...); never mutated afterwards.
    Stored book ids must already be canonical keys, since chapter reads
    query storage by the key.
    """

    def __init__(self, books: Iterable[Book], verse_counts: Dict[str, Tuple[int, ...]], source: str = "corpus"):
        ordered = tuple(sorted(books, key=lambda b: b.ordinal))
        self._books = MappingProxyType({book.id: book for book in ordered})
        self._order = tuple(book.id for book in ordered)
        self._verse_counts = MappingProxyType(dict(verse_counts))
        self._source = source

    @classmethod
    def from_rows(
        cls,
        book_rows: List[Dict[str, Any]],
        verse_rows: Iterable[VerseRow],
        source: str = "corpus"
    ) -> "BookIndex":
        """
        Aggregate max chapter and per-chapter verse counts for each book.

        Args:
            book_rows: Catalog rows with ordinal, id, name, testament
            verse_rows: Every verse row of the corpus
            source: Label used in error messages

        Raises:
            CorpusCorruptError: On non-canonical or duplicate ids,
                non-contiguous ordinals, rows for unknown books, empty
                books or chapter gaps
        """
        catalog: Dict[str, Dict[str, Any]] = {}
        for row in book_rows:
            key = _canonical_id(row["id"], source)
            if key in catalog:
                raise CorpusCorruptError(source, f"duplicate book id '{key}'")
            catalog[key] = row

        ordinals = sorted(row["ordinal"] for row in catalog.values())
        if ordinals != list(range(1, len(ordinals) + 1)):
            raise CorpusCorruptError(source, "book ordinals are not a contiguous 1..N sequence")

        # book -> chapter -> verse count
        counts: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
        for row in verse_rows:
            key = _canonical_id(row.book_id, source)
            if key not in catalog:
                raise CorpusCorruptError(source, f"verse row for unknown book '{row.book_id}'")
            counts[key][row.chapter] += 1

        books = []
        verse_counts: Dict[str, Tuple[int, ...]] = {}
        for key, row in catalog.items():
            chapters = counts.get(key)
            if not chapters:
                raise CorpusCorruptError(source, f"book '{key}' has no verses")
            chapter_count = max(chapters)
            if len(chapters) != chapter_count:
                missing = sorted(set(range(1, chapter_count + 1)) - set(chapters))
                raise CorpusCorruptError(source, f"book '{key}' is missing chapters {missing}")
            verse_counts[key] = tuple(chapters[n] for n in range(1, chapter_count + 1))
            books.append(Book(
                id=key,
                ordinal=row["ordinal"],
                name=row["name"],
                testament=Testament(row["testament"]),
                chapter_count=chapter_count
            ))

        index = cls(books, verse_counts, source=source)
        logger.info(
            f"Book index built: {len(index)} books, "
            f"{sum(b.chapter_count for b in books)} chapters, {index.total_verses} verses"
        )
        return index

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, book_id: str) -> bool:
        return normalize_book_id(book_id) in self._books

    @property
    def total_verses(self) -> int:
        return sum(sum(counts) for counts in self._verse_counts.values())

    @property
    def total_chapters(self) -> int:
        return sum(book.chapter_count for book in self._books.values())

    def resolve(self, book_id: str) -> str:
        """
        Resolve a (possibly denormalized) identifier to its canonical key.

        Raises:
            UnknownBookError: If the book is not in the index
        """
        key = normalize_book_id(book_id)
        if key not in self._books:
            raise UnknownBookError(book_id, self.suggest(book_id))
        return key

    def get_book(self, book_id: str) -> Book:
        """Get book metadata; raises UnknownBookError."""
        return self._books[self.resolve(book_id)]

    def chapter_count(self, book_id: str) -> int:
        """Number of chapters in a book; raises UnknownBookError."""
        return self.get_book(book_id).chapter_count

    def verse_count(self, book_id: str, chapter: int) -> int:
        """
        Number of verses in a chapter.

        Raises:
            UnknownBookError: If the book is not in the index
            ChapterNotFoundError: If chapter is outside 1..chapter_count
        """
        key = self.resolve(book_id)
        counts = self._verse_counts[key]
        if not 1 <= chapter <= len(counts):
            raise ChapterNotFoundError(key, chapter, len(counts))
        return counts[chapter - 1]

    def has_chapter(self, book_id: str, chapter: int) -> bool:
        key = normalize_book_id(book_id)
        book = self._books.get(key)
        return book is not None and 1 <= chapter <= book.chapter_count

    def book_order(self) -> Tuple[str, ...]:
        """Book ids in canonical order (Old Testament first)."""
        return self._order

    def books(self, testament: Optional[Testament] = None) -> List[Book]:
        """Books in canonical order, optionally restricted to one testament."""
        books = [self._books[key] for key in self._order]
        if testament is not None:
            books = [book for book in books if book.testament == testament]
        return books

    def suggest(self, book_id: str) -> Optional[str]:
        """
        Closest known book id for an unknown identifier.

        Only used for error messages and logs; lookups never resolve fuzzily.
        """
        key = normalize_book_id(book_id)
        if not key or not self._order:
            return None
        match = process.extractOne(
            key,
            self._order,
            scorer=fuzz.ratio,
            score_cutoff=config.BOOK_SUGGESTION_MIN_SCORE
        )
        return match[0] if match else None
