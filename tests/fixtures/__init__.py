"""
Shared test fixtures for the scripture data store tests.

This module writes small corpus assets to a temporary directory: Genesis
(50 chapters), Ruth (4 chapters) and John (3 chapters) with a handful of
known verses. Filler verses never contain "love", "beginning" or "jose".
"""
from pathlib import Path
from typing import Dict, List, Tuple
import sqlite3
import sys

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import config
from scripture.schema import CREATE_TABLES, META_SCHEMA_VERSION, META_TRANSLATION

GENESIS_1_1 = "In the beginning God created the heaven and the earth."
GENESIS_37_3 = "Now Israel loved Joseph more than all his children."
GENESIS_50_1 = "Y José lloró sobre el rostro de su padre, y lo besó."
RUTH_1_2 = "Love endureth all things."
JOHN_1_1 = "In the beginning was the Word, and the Word was with God."
JOHN_3_16 = "For God so loved the world, that he gave his only begotten Son."

# (ordinal, id, name, testament)
FIXTURE_BOOKS = [
    (1, "genesis", "Genesis", "old"),
    (2, "ruth", "Ruth", "old"),
    (3, "john", "John", "new"),
]

# Chapter whose rows are inserted in descending verse order
REVERSED_CHAPTER = ("john", 3)

CorpusData = Dict[str, Dict[int, List[Tuple[int, str]]]]


def _filler(name: str, chapter: int, count: int) -> List[Tuple[int, str]]:
    return [(v, f"{name} {chapter}:{v} filler verse text.") for v in range(1, count + 1)]


def fixture_corpus() -> CorpusData:
    """Verse data of the fixture corpus: book -> chapter -> [(verse, text)]."""
    genesis = {n: _filler("Genesis", n, 3) for n in range(1, 51)}
    genesis[1] = [
        (1, GENESIS_1_1),
        (2, "And the earth was without form, and void."),
        (3, "And God said, Let there be light: and there was light."),
        (4, "And God saw the light, that it was good."),
        (5, "And God called the light Day, and the darkness he called Night."),
    ]
    genesis[37][2] = (3, GENESIS_37_3)
    genesis[50][0] = (1, GENESIS_50_1)

    ruth = {n: _filler("Ruth", n, 3) for n in range(1, 5)}
    ruth[1][1] = (2, RUTH_1_2)

    john = {n: _filler("John", n, 3) for n in range(1, 4)}
    john[1][0] = (1, JOHN_1_1)
    john[3] = _filler("John", 3, 15) + [(16, JOHN_3_16)]

    return {"genesis": genesis, "ruth": ruth, "john": john}


def fixture_totals(corpus: CorpusData = None) -> Tuple[int, int]:
    """(total chapters, total verses) of a fixture corpus."""
    corpus = corpus or fixture_corpus()
    chapters = sum(len(book) for book in corpus.values())
    verses = sum(len(rows) for book in corpus.values() for rows in book.values())
    return chapters, verses


def write_fixture_corpus(
    path: Path,
    corpus: CorpusData = None,
    books: List[Tuple[int, str, str, str]] = None,
    schema_version: str = None,
    translation: str = "Fixture"
) -> Path:
    """
    Write a corpus asset to path.

    Args:
        path: Destination database file
        corpus: Verse data (defaults to fixture_corpus())
        books: Book catalog rows (defaults to FIXTURE_BOOKS)
        schema_version: Meta marker (defaults to config.CORPUS_SCHEMA_VERSION)
        translation: Translation name stored in meta

    Returns:
        The database path
    """
    path = Path(path)
    corpus = corpus if corpus is not None else fixture_corpus()
    books = books if books is not None else FIXTURE_BOOKS
    schema_version = schema_version or config.CORPUS_SCHEMA_VERSION

    connection = sqlite3.connect(str(path))
    try:
        connection.executescript(CREATE_TABLES)
        connection.executemany(
            "INSERT INTO meta (k, v) VALUES (?, ?)",
            [(META_SCHEMA_VERSION, schema_version), (META_TRANSLATION, translation)]
        )
        connection.executemany(
            "INSERT INTO books (ordinal, id, name, testament) VALUES (?, ?, ?, ?)",
            books
        )
        for book_id, chapters in corpus.items():
            for chapter, verses in chapters.items():
                rows = [(book_id, chapter, verse, text) for verse, text in verses]
                if (book_id, chapter) == REVERSED_CHAPTER:
                    rows.reverse()
                connection.executemany(
                    "INSERT INTO verses (book_id, chapter, verse, text) VALUES (?, ?, ?, ?)",
                    rows
                )
        connection.commit()
    finally:
        connection.close()
    return path


def corrupt_verse(path: Path, book_id: str, chapter: int, verse: int, text: str = "") -> None:
    """Overwrite one verse's text in an existing asset (empty text is malformed)."""
    connection = sqlite3.connect(str(path))
    try:
        connection.execute(
            "UPDATE verses SET text = ? WHERE book_id = ? AND chapter = ? AND verse = ?",
            (text, book_id, chapter, verse)
        )
        connection.commit()
    finally:
        connection.close()


def write_not_a_database(path: Path) -> Path:
    """Write a file that is not a SQLite database."""
    path = Path(path)
    path.write_text("this is not a sqlite database\n" * 64, encoding="utf-8")
    return path
