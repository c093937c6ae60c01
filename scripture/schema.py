"""
Corpus asset schema.

The bundled corpus is a SQLite file with three tables:
- meta: key/value markers (schema_version, translation)
- books: canonical book catalog (ordinal, id, name, testament)
- verses: one row per verse

The schema is shared by the loader (validation) and the build script (writing).
"""

REQUIRED_TABLES = ("meta", "books", "verses")

CREATE_TABLES = """
CREATE TABLE IF NOT EXISTS meta (
    k TEXT PRIMARY KEY,
    v TEXT
);

CREATE TABLE IF NOT EXISTS books (
    ordinal INTEGER PRIMARY KEY,
    id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    testament TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS verses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id TEXT NOT NULL,
    chapter INTEGER NOT NULL,
    verse INTEGER NOT NULL,
    text TEXT NOT NULL,
    UNIQUE(book_id, chapter, verse)
);

CREATE INDEX IF NOT EXISTS idx_verses_book_chapter ON verses(book_id, chapter);
"""

META_SCHEMA_VERSION = "schema_version"
META_TRANSLATION = "translation"
