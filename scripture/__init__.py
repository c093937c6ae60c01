"""
Scripture data store module.

Provides access to the bundled Bible corpus: loading, the book/chapter
index, the chapter cache, verse search and the lifecycle manager.
"""
from scripture.corpus_loader import CorpusLoader, CorpusHandle
from scripture.book_index import BookIndex
from scripture.verse_cache import ChapterCache
from scripture.search_engine import SearchEngine
from scripture.bible_store import BibleStore

__all__ = [
    'BibleStore',
    'BookIndex',
    'ChapterCache',
    'CorpusHandle',
    'CorpusLoader',
    'SearchEngine'
]
