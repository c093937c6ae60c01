"""
Custom exceptions for the scripture data store.

All exceptions must be explicit and provide clear error messages
explaining how to fix the issue.
"""
from typing import Optional


class BibleStoreError(Exception):
    """Base exception for all scripture data store errors."""
    pass


class CorpusUnavailableError(BibleStoreError):
    """Raised when the bundled corpus asset is missing or unreadable."""

    def __init__(self, db_path: str, reason: str = ""):
        message = f"Corpus database not available: {db_path}"
        if reason:
            message += f" Reason: {reason}"
        message += "\nFix: Build the corpus with scripts/build_corpus.py and place it at the configured path"
        super().__init__(message)
        self.db_path = db_path
        self.reason = reason


class CorpusCorruptError(BibleStoreError):
    """Raised when the corpus asset fails structural validation."""

    def __init__(self, db_path: str, reason: str = ""):
        message = f"Corpus database is corrupt: {db_path}"
        if reason:
            message += f" Reason: {reason}"
        message += "\nFix: Rebuild the corpus asset with scripts/build_corpus.py"
        super().__init__(message)
        self.db_path = db_path
        self.reason = reason


class UnknownBookError(BibleStoreError):
    """Raised when a book identifier is not present in the index."""

    def __init__(self, book_id: str, suggestion: Optional[str] = None):
        message = f"Unknown book: '{book_id}'"
        if suggestion:
            message += f". Did you mean '{suggestion}'?"
        message += "\nFix: Use an identifier from BibleStore.book_order()"
        super().__init__(message)
        self.book_id = book_id
        self.suggestion = suggestion


class ChapterNotFoundError(BibleStoreError):
    """Raised when a chapter number is outside the book's range."""

    def __init__(self, book_id: str, chapter: int, chapter_count: Optional[int] = None):
        message = f"Chapter not found: {book_id} {chapter}"
        if chapter_count is not None:
            message += f" (book has {chapter_count} chapters)"
        message += "\nFix: Request a chapter between 1 and the book's chapter count"
        super().__init__(message)
        self.book_id = book_id
        self.chapter = chapter
        self.chapter_count = chapter_count


class StorageIOError(BibleStoreError):
    """Raised when a storage read fails."""

    def __init__(self, operation: str, reason: str = ""):
        message = f"Storage read failed during {operation}"
        if reason:
            message += f": {reason}"
        message += "\nFix: Retry the operation; if it keeps failing, reset the database"
        super().__init__(message)
        self.operation = operation
        self.reason = reason


class StoreClosedError(BibleStoreError):
    """Raised when an operation is invoked after the store was closed."""

    def __init__(self, operation: str):
        message = f"Cannot run '{operation}': the Bible store is closed"
        message += "\nFix: Call initialize_bible_data() again before reading"
        super().__init__(message)
        self.operation = operation


class StoreNotReadyError(BibleStoreError):
    """Raised when an operation requires a ready store."""

    def __init__(self, operation: str, state: str):
        message = f"Cannot run '{operation}' while the Bible store is {state}"
        message += "\nFix: Await initialize_bible_data() before using the store"
        super().__init__(message)
        self.operation = operation
        self.state = state
