"""
Bundled Corpus Loader.

Opens the read-only SQLite corpus asset shipped with the application,
validates its structure and converts raw rows into typed verse models.
Raw sqlite3 errors never leave this module: they are translated into
CorpusUnavailableError, CorpusCorruptError or StorageIOError.
"""
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Dict, Any
from models import Verse, VerseRow, Testament
from errors import (
    CorpusUnavailableError,
    CorpusCorruptError,
    ChapterNotFoundError,
    StorageIOError
)
from scripture.schema import REQUIRED_TABLES, META_SCHEMA_VERSION, META_TRANSLATION
import config

logger = logging.getLogger(__name__)


class CorpusHandle:
    """
    Open connection to the corpus asset.

    Owned by whoever called CorpusLoader.open(); safe to use from a worker
    thread because every cursor operation runs under the handle's lock.
    """

    def __init__(self, db_path: Path, connection: sqlite3.Connection):
        self.db_path = db_path
        self.translation: Optional[str] = None
        self.schema_version: Optional[str] = None
        self._connection: Optional[sqlite3.Connection] = connection
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._connection is None

    def execute(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Run a query and fetch all rows."""
        with self._lock:
            if self._connection is None:
                raise sqlite3.ProgrammingError("Cannot operate on a closed corpus handle")
            return self._connection.execute(query, params).fetchall()

    def iterate(self, query: str, params: tuple = (), batch_size: int = 1000) -> Iterator[sqlite3.Row]:
        """Run a query and yield rows lazily in batches."""
        with self._lock:
            if self._connection is None:
                raise sqlite3.ProgrammingError("Cannot operate on a closed corpus handle")
            cursor = self._connection.execute(query, params)
        while True:
            with self._lock:
                if self._connection is None:
                    raise sqlite3.ProgrammingError("Corpus handle closed during iteration")
                batch = cursor.fetchmany(batch_size)
            if not batch:
                return
            yield from batch

    def release(self) -> bool:
        """Close the connection. Returns False if it was already closed."""
        with self._lock:
            if self._connection is None:
                return False
            self._connection.close()
            self._connection = None
            return True


class CorpusLoader:
    """
    Connector for the bundled corpus SQLite database.

    Provides methods to open and validate the asset, read single chapters
    and stream every verse row for index building.
    """

    def __init__(self, db_path: Optional[Path] = None, verify_integrity: Optional[bool] = None):
        """
        Initialize corpus loader.

        Args:
            db_path: Path to the corpus SQLite file.
                    Defaults to config.CORPUS_DB_PATH
            verify_integrity: Run PRAGMA quick_check on open.
                    Defaults to config.CORPUS_VERIFY_INTEGRITY
        """
        self.db_path = Path(db_path or config.CORPUS_DB_PATH)
        self.verify_integrity = (
            config.CORPUS_VERIFY_INTEGRITY if verify_integrity is None else verify_integrity
        )

    def open(self) -> CorpusHandle:
        """
        Open and validate the corpus asset.

        Returns:
            CorpusHandle for subsequent reads

        Raises:
            CorpusUnavailableError: If the file is missing or cannot be opened
            CorpusCorruptError: If structural validation fails
        """
        if not self.db_path.exists():
            raise CorpusUnavailableError(str(self.db_path), "file does not exist")
        if not self.db_path.is_file():
            raise CorpusUnavailableError(str(self.db_path), "path is not a file")

        logger.info(f"Opening corpus database: {self.db_path}")
        try:
            connection = sqlite3.connect(
                f"{self.db_path.resolve().as_uri()}?mode=ro",
                uri=True,
                check_same_thread=False
            )
            connection.row_factory = sqlite3.Row  # Enable column access by name
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to corpus database: {e}")
            raise CorpusUnavailableError(str(self.db_path), str(e)) from e

        handle = CorpusHandle(self.db_path, connection)
        try:
            self._validate(handle)
        except CorpusCorruptError:
            handle.release()
            raise
        except sqlite3.DatabaseError as e:
            # "file is not a database" and friends
            handle.release()
            logger.error(f"Corpus validation failed: {e}")
            raise CorpusCorruptError(str(self.db_path), str(e)) from e

        logger.debug(
            f"Corpus database ready (schema {handle.schema_version}, "
            f"translation {handle.translation})"
        )
        return handle

    def _validate(self, handle: CorpusHandle) -> None:
        """Check tables, schema marker and (optionally) page integrity."""
        tables = {
            row[0] for row in handle.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
        }
        missing = [name for name in REQUIRED_TABLES if name not in tables]
        if missing:
            raise CorpusCorruptError(str(self.db_path), f"missing tables: {', '.join(missing)}")

        meta = {row["k"]: row["v"] for row in handle.execute("SELECT k, v FROM meta")}
        version = meta.get(META_SCHEMA_VERSION)
        if version != config.CORPUS_SCHEMA_VERSION:
            raise CorpusCorruptError(
                str(self.db_path),
                f"schema version {version!r}, expected {config.CORPUS_SCHEMA_VERSION!r}"
            )
        handle.schema_version = version
        handle.translation = meta.get(META_TRANSLATION)

        if self.verify_integrity:
            result = handle.execute("PRAGMA quick_check")
            status = result[0][0] if result else None
            if status != "ok":
                raise CorpusCorruptError(str(self.db_path), f"integrity check failed: {status}")

    def close(self, handle: Optional[CorpusHandle]) -> None:
        """Release the handle. Safe to call more than once."""
        if handle is None:
            return
        if handle.release():
            logger.debug("Corpus database connection closed")

    def read_books(self, handle: CorpusHandle) -> List[Dict[str, Any]]:
        """
        Read the book catalog.

        Returns:
            List of {"ordinal", "id", "name", "testament"} dicts ordered by ordinal

        Raises:
            CorpusCorruptError: If a row is malformed
            StorageIOError: On read failure
        """
        try:
            rows = handle.execute(
                "SELECT ordinal, id, name, testament FROM books ORDER BY ordinal"
            )
        except sqlite3.Error as e:
            logger.error(f"Database error reading books: {e}")
            raise StorageIOError("read_books", str(e)) from e

        books = []
        for row in rows:
            ordinal, book_id, name, testament = row["ordinal"], row["id"], row["name"], row["testament"]
            if not isinstance(ordinal, int) or not isinstance(book_id, str) or not book_id:
                raise CorpusCorruptError(str(self.db_path), f"malformed book row: {tuple(row)}")
            try:
                testament = Testament(str(testament).lower())
            except ValueError as e:
                raise CorpusCorruptError(
                    str(self.db_path), f"unknown testament {testament!r} for book {book_id}"
                ) from e
            books.append({
                "ordinal": ordinal,
                "id": book_id,
                "name": name if isinstance(name, str) and name else book_id,
                "testament": testament
            })
        return books

    def read_chapter(self, handle: CorpusHandle, book_id: str, chapter: int) -> List[Verse]:
        """
        Read one chapter directly from storage (uncached).

        Args:
            handle: Open corpus handle
            book_id: Canonical book key
            chapter: Chapter number

        Returns:
            Verses in ascending verse order

        Raises:
            ChapterNotFoundError: If the chapter has no rows
            CorpusCorruptError: If a row is malformed or a verse number repeats
            StorageIOError: On read failure
        """
        try:
            rows = handle.execute(
                "SELECT verse, text FROM verses WHERE book_id = ? AND chapter = ? ORDER BY verse",
                (book_id, chapter)
            )
        except sqlite3.Error as e:
            logger.error(f"Database error reading {book_id} {chapter}: {e}")
            raise StorageIOError(f"read_chapter({book_id}, {chapter})", str(e)) from e

        if not rows:
            raise ChapterNotFoundError(book_id, chapter)

        verses = [self._parse_verse(book_id, chapter, row["verse"], row["text"]) for row in rows]
        verses.sort(key=lambda v: v.number)
        for previous, current in zip(verses, verses[1:]):
            if previous.number == current.number:
                raise CorpusCorruptError(
                    str(self.db_path),
                    f"duplicate verse {book_id} {chapter}:{current.number}"
                )
        return verses

    def iter_verse_rows(self, handle: CorpusHandle) -> Iterator[VerseRow]:
        """
        Stream every verse row of the corpus.

        Rows are yielded lazily; call again for a fresh pass.

        Raises:
            CorpusCorruptError: If a row is malformed
            StorageIOError: On read failure
        """
        try:
            for row in handle.iterate("SELECT book_id, chapter, verse, text FROM verses"):
                book_id, chapter = row["book_id"], row["chapter"]
                if not isinstance(book_id, str) or not isinstance(chapter, int) or chapter < 1:
                    raise CorpusCorruptError(str(self.db_path), f"malformed verse row: {tuple(row)}")
                verse = self._parse_verse(book_id, chapter, row["verse"], row["text"])
                yield VerseRow(book_id, chapter, verse.number, verse.text)
        except sqlite3.Error as e:
            logger.error(f"Database error streaming verses: {e}")
            raise StorageIOError("iter_verse_rows", str(e)) from e

    def _parse_verse(self, book_id: str, chapter: int, number: Any, text: Any) -> Verse:
        """Convert a raw (verse, text) pair into a Verse, rejecting bad values."""
        if not isinstance(number, int) or isinstance(number, bool):
            raise CorpusCorruptError(
                str(self.db_path), f"non-integer verse number {number!r} in {book_id} {chapter}"
            )
        if not isinstance(text, str):
            raise CorpusCorruptError(
                str(self.db_path), f"non-text verse {book_id} {chapter}:{number}"
            )
        try:
            return Verse(number=number, text=text.strip())
        except ValueError as e:
            raise CorpusCorruptError(str(self.db_path), f"{book_id} {chapter}:{number}: {e}") from e
