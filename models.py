"""
Data models for the scripture data store.

This module defines the core data structures used throughout the system.
Corpus values (books, chapters, verses) are frozen: consumers treat them as
immutable snapshots.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple


class Testament(str, Enum):
    """Enumeration of testaments."""
    OLD = "old"
    NEW = "new"


class StoreState(str, Enum):
    """Lifecycle states of the Bible store."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RESETTING = "resetting"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(frozen=True)
class Book:
    """A book of the corpus with its canonical position."""
    id: str  # Canonical key, e.g. "genesis", "1samuel"
    ordinal: int  # 1..N in canonical order
    name: str
    testament: Testament
    chapter_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "ordinal": self.ordinal,
            "name": self.name,
            "testament": self.testament.value,
            "chapter_count": self.chapter_count
        }


@dataclass(frozen=True)
class Verse:
    """A single verse."""
    number: int
    text: str

    def __post_init__(self):
        """Validate verse data."""
        if self.number < 1:
            raise ValueError(f"Verse number must be positive, got {self.number}")
        if not self.text:
            raise ValueError("Verse text must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"number": self.number, "text": self.text}


@dataclass(frozen=True)
class Chapter:
    """A chapter payload: verses in ascending order."""
    book_id: str
    number: int
    verses: Tuple[Verse, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "book": self.book_id,
            "chapter": self.number,
            "verses": [verse.to_dict() for verse in self.verses]
        }


@dataclass(frozen=True)
class VerseRow:
    """One row of the corpus stream: (book, chapter, verse, text)."""
    book_id: str
    chapter: int
    verse: int
    text: str


@dataclass(frozen=True)
class VerseReference:
    """A verse together with its location, e.g. for the verse of the day."""
    book: str
    chapter: int
    verse: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text
        }


@dataclass
class CacheEntry:
    """A cached chapter with access bookkeeping."""
    chapter: Chapter
    last_accessed: float
    access_count: int = 0


@dataclass(frozen=True)
class SearchResult:
    """A verse matching a search query."""
    book: str
    chapter: int
    verse: int
    text: str
    score: float = 1.0  # Substring search: every hit scores the same

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
            "score": self.score
        }


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of chapter cache counters."""
    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hit_rate
        }


@dataclass(frozen=True)
class CorpusStats:
    """Summary of the loaded corpus."""
    translation: Optional[str]
    total_books: int
    total_chapters: int
    total_verses: int
    testaments: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "translation": self.translation,
            "total_books": self.total_books,
            "total_chapters": self.total_chapters,
            "total_verses": self.total_verses,
            "testaments": self.testaments
        }
