"""
Chapter cache tests.

Tests for:
- LRU eviction order
- Hit/miss/eviction counters
- Best-effort preloading
"""
import sys
from pathlib import Path
import unittest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from errors import StorageIOError
from models import Chapter, Verse
from scripture.verse_cache import ChapterCache


def make_chapter(book_id: str, number: int) -> Chapter:
    return Chapter(book_id=book_id, number=number, verses=(Verse(1, f"{book_id} {number}:1"),))


class TestChapterCache(unittest.TestCase):
    """Test LRU behaviour and counters."""

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            ChapterCache(capacity=0)

    def test_get_miss_then_hit(self):
        cache = ChapterCache(capacity=2)
        self.assertIsNone(cache.get("genesis", 1))
        cache.put("genesis", 1, make_chapter("genesis", 1))
        cached = cache.get("genesis", 1)
        self.assertEqual((cached.book_id, cached.number), ("genesis", 1))

        stats = cache.stats()
        self.assertEqual((stats.hits, stats.misses), (1, 1))
        self.assertAlmostEqual(stats.hit_rate, 0.5)

    def test_least_recently_used_is_evicted(self):
        cache = ChapterCache(capacity=2)
        cache.put("genesis", 1, make_chapter("genesis", 1))
        cache.put("genesis", 2, make_chapter("genesis", 2))
        cache.get("genesis", 1)  # genesis 2 is now least recently used
        cache.put("genesis", 3, make_chapter("genesis", 3))

        self.assertIn(("genesis", 1), cache)
        self.assertNotIn(("genesis", 2), cache)
        self.assertIn(("genesis", 3), cache)
        self.assertEqual(cache.stats().evictions, 1)
        self.assertEqual(len(cache), 2)

    def test_replace_does_not_evict(self):
        cache = ChapterCache(capacity=2)
        cache.put("genesis", 1, make_chapter("genesis", 1))
        cache.put("genesis", 2, make_chapter("genesis", 2))
        replacement = make_chapter("genesis", 2)
        cache.put("genesis", 2, replacement)
        self.assertEqual(len(cache), 2)
        self.assertEqual(cache.stats().evictions, 0)
        self.assertIs(cache.get("genesis", 2), replacement)

    def test_clear_keeps_counters(self):
        cache = ChapterCache(capacity=2)
        cache.put("ruth", 1, make_chapter("ruth", 1))
        cache.get("ruth", 1)
        cache.clear()
        self.assertEqual(len(cache), 0)
        self.assertEqual(cache.stats().hits, 1)
        self.assertEqual(cache.stats().to_dict()["size"], 0)


class TestChapterCachePreload(unittest.IsolatedAsyncioTestCase):
    """Test preloading."""

    async def test_preload_skips_failures(self):
        cache = ChapterCache(capacity=5)
        fetched = []

        async def fetch(book_id, chapter):
            fetched.append((book_id, chapter))
            if chapter == 2:
                raise StorageIOError("read_chapter", "disk error")
            return make_chapter(book_id, chapter)

        loaded = await cache.preload([("john", 1), ("john", 2), ("john", 3)], fetch)

        self.assertEqual(loaded, [("john", 1), ("john", 3)])
        self.assertEqual(len(fetched), 3)
        self.assertNotIn(("john", 2), cache)

    async def test_preload_skips_cached_keys(self):
        cache = ChapterCache(capacity=5)
        cache.put("john", 1, make_chapter("john", 1))
        calls = []

        async def fetch(book_id, chapter):
            calls.append((book_id, chapter))
            return make_chapter(book_id, chapter)

        loaded = await cache.preload([("john", 1), ("john", 2)], fetch)
        self.assertEqual(loaded, [("john", 2)])
        self.assertEqual(calls, [("john", 2)])


if __name__ == "__main__":
    unittest.main()
