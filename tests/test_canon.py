"""
Canon table tests.
"""
import sys
from pathlib import Path
import unittest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from data.canon import CANON, BOOK_ORDER, lookup, testament_books
from models import Testament
from scripture.normalize import normalize_book_id


class TestCanon(unittest.TestCase):
    """Test the 66-book canon table."""

    def test_sixty_six_books(self):
        self.assertEqual(len(CANON), 66)
        self.assertEqual([b.ordinal for b in CANON], list(range(1, 67)))
        self.assertEqual(len(set(BOOK_ORDER)), 66)

    def test_testament_split(self):
        self.assertEqual(len(testament_books(Testament.OLD)), 39)
        self.assertEqual(len(testament_books(Testament.NEW)), 27)
        self.assertEqual(BOOK_ORDER[0], "genesis")
        self.assertEqual(BOOK_ORDER[39], "matthew")

    def test_keys_are_normalized(self):
        for book in CANON:
            self.assertEqual(normalize_book_id(book.key), book.key)

    def test_lookup_by_name_and_alias(self):
        self.assertEqual(lookup("1 Samuel").key, "1samuel")
        self.assertEqual(lookup("Song of Solomon").key, "songofsolomon")
        self.assertEqual(lookup("Génesis").key, "genesis")
        self.assertEqual(lookup("juan").key, "john")
        self.assertEqual(lookup("apocalipsis").key, "revelation")
        self.assertIsNone(lookup("maccabees"))

    def test_chapter_counts(self):
        self.assertEqual(lookup("genesis").chapters, 50)
        self.assertEqual(lookup("psalms").chapters, 150)
        self.assertEqual(sum(b.chapters for b in CANON), 1189)


if __name__ == "__main__":
    unittest.main()
