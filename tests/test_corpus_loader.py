"""
Corpus loader tests.

Tests for:
- Opening and validating the corpus asset
- Reading single chapters
- Streaming verse rows
- Handle release
"""
import sys
import sqlite3
import tempfile
from pathlib import Path
import unittest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from errors import (
    ChapterNotFoundError,
    CorpusCorruptError,
    CorpusUnavailableError,
    StorageIOError
)
from models import Testament, Verse
from scripture.corpus_loader import CorpusLoader
from tests.fixtures import (
    JOHN_3_16,
    corrupt_verse,
    fixture_totals,
    write_fixture_corpus,
    write_not_a_database
)


class LoaderTestCase(unittest.TestCase):
    """Base class writing a fixture corpus to a temporary directory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.db_path = write_fixture_corpus(self.tmp_dir / "bible.db")
        self.loader = CorpusLoader(db_path=self.db_path)

    def tearDown(self):
        self._tmp.cleanup()


class TestCorpusOpen(LoaderTestCase):
    """Test opening and validation."""

    def test_open_reads_meta(self):
        handle = self.loader.open()
        try:
            self.assertFalse(handle.closed)
            self.assertEqual(handle.translation, "Fixture")
            self.assertEqual(handle.schema_version, "1")
        finally:
            self.loader.close(handle)

    def test_missing_file(self):
        loader = CorpusLoader(db_path=self.tmp_dir / "missing.db")
        with self.assertRaises(CorpusUnavailableError) as ctx:
            loader.open()
        self.assertIn("Fix:", str(ctx.exception))

    def test_directory_is_unavailable(self):
        loader = CorpusLoader(db_path=self.tmp_dir)
        with self.assertRaises(CorpusUnavailableError):
            loader.open()

    def test_not_a_database(self):
        path = write_not_a_database(self.tmp_dir / "junk.db")
        with self.assertRaises(CorpusCorruptError):
            CorpusLoader(db_path=path).open()

    def test_wrong_schema_version(self):
        path = write_fixture_corpus(self.tmp_dir / "old.db", schema_version="0")
        with self.assertRaises(CorpusCorruptError) as ctx:
            CorpusLoader(db_path=path).open()
        self.assertIn("schema version", ctx.exception.reason)

    def test_missing_tables(self):
        path = self.tmp_dir / "empty.db"
        connection = sqlite3.connect(str(path))
        connection.execute("CREATE TABLE meta (k TEXT PRIMARY KEY, v TEXT)")
        connection.commit()
        connection.close()
        with self.assertRaises(CorpusCorruptError) as ctx:
            CorpusLoader(db_path=path).open()
        self.assertIn("books", ctx.exception.reason)

    def test_open_without_integrity_check(self):
        loader = CorpusLoader(db_path=self.db_path, verify_integrity=False)
        handle = loader.open()
        loader.close(handle)
        self.assertTrue(handle.closed)

    def test_close_is_idempotent(self):
        handle = self.loader.open()
        self.loader.close(handle)
        self.loader.close(handle)
        self.loader.close(None)
        self.assertTrue(handle.closed)


class TestCorpusReads(LoaderTestCase):
    """Test chapter reads and row streaming."""

    def setUp(self):
        super().setUp()
        self.handle = self.loader.open()

    def tearDown(self):
        self.loader.close(self.handle)
        super().tearDown()

    def test_read_books(self):
        books = self.loader.read_books(self.handle)
        self.assertEqual([b["id"] for b in books], ["genesis", "ruth", "john"])
        self.assertEqual(books[0]["testament"], Testament.OLD)
        self.assertEqual(books[2]["testament"], Testament.NEW)

    def test_read_chapter_ascending(self):
        # Rows of John 3 are stored in descending order
        verses = self.loader.read_chapter(self.handle, "john", 3)
        self.assertEqual([v.number for v in verses], list(range(1, 17)))
        self.assertEqual(verses[-1], Verse(16, JOHN_3_16))

    def test_read_missing_chapter(self):
        with self.assertRaises(ChapterNotFoundError):
            self.loader.read_chapter(self.handle, "genesis", 51)

    def test_read_after_close(self):
        self.loader.close(self.handle)
        with self.assertRaises(StorageIOError):
            self.loader.read_chapter(self.handle, "genesis", 1)

    def test_iter_verse_rows(self):
        rows = list(self.loader.iter_verse_rows(self.handle))
        _, total_verses = fixture_totals()
        self.assertEqual(len(rows), total_verses)
        self.assertEqual(len({(r.book_id, r.chapter, r.verse) for r in rows}), total_verses)


class TestMalformedRows(LoaderTestCase):
    """Test rejection of malformed verse rows."""

    def test_empty_text_is_corrupt(self):
        corrupt_verse(self.db_path, "ruth", 2, 1, text="   ")
        handle = self.loader.open()
        try:
            with self.assertRaises(CorpusCorruptError):
                self.loader.read_chapter(handle, "ruth", 2)
            with self.assertRaises(CorpusCorruptError):
                list(self.loader.iter_verse_rows(handle))
            # Other chapters remain readable
            self.assertEqual(len(self.loader.read_chapter(handle, "ruth", 1)), 3)
        finally:
            self.loader.close(handle)

    def test_non_integer_verse_is_corrupt(self):
        connection = sqlite3.connect(str(self.db_path))
        connection.execute(
            "UPDATE verses SET verse = 'x' WHERE book_id = 'ruth' AND chapter = 3 AND verse = 2"
        )
        connection.commit()
        connection.close()
        handle = self.loader.open()
        try:
            with self.assertRaises(CorpusCorruptError):
                self.loader.read_chapter(handle, "ruth", 3)
        finally:
            self.loader.close(handle)


if __name__ == "__main__":
    unittest.main()
