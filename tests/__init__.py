"""
Test suite for the Scripture Data Store.

Test Structure:
--------------
- test_normalize.py     : Book id and search text normalization
- test_corpus_loader.py : Opening, validating and reading the corpus asset
- test_book_index.py    : Book/chapter index invariants and suggestions
- test_verse_cache.py   : LRU chapter cache and preloading
- test_search_engine.py : Full-corpus verse search
- test_bible_store.py   : Lifecycle manager and public read API
- test_canon.py         : Canonical book table
- test_build_corpus.py  : Corpus build script
- fixtures/             : Fixture corpus writer

Running Tests:
-------------
Run all tests:
    python -m pytest tests/

Run a specific test file:
    python -m pytest tests/test_bible_store.py -v
"""

from tests.fixtures import (
    fixture_corpus,
    fixture_totals,
    write_fixture_corpus,
    corrupt_verse,
    write_not_a_database
)

__all__ = [
    'fixture_corpus',
    'fixture_totals',
    'write_fixture_corpus',
    'corrupt_verse',
    'write_not_a_database'
]
