#!/usr/bin/env python3
"""
Build the bundled corpus database.

Converts Bible source data into the read-only SQLite asset consumed by
CorpusLoader. Two input layouts are accepted:

- A directory of per-book JSON files (genesis.json, 1-samuel.json, ...), each
  mapping chapter numbers to verse lists: {"1": [{"number": 1, "text": "..."}]}
- A single JSON file holding a list of verse objects:
  [{"book_name": "Genesis", "chapter": 1, "verse": 1, "text": "..."}]

Books are ordered and classified using data/canon.py; file names and book
names may use any alias known to the canon table.

Usage:
    python scripts/build_corpus.py SOURCE [--output PATH] [--translation NAME] [--force]
"""
import argparse
import json
import logging
import sqlite3
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Tuple

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import config
from data.canon import lookup
from scripture.schema import CREATE_TABLES, META_SCHEMA_VERSION, META_TRANSLATION

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# book key -> chapter -> [(verse, text)]
CorpusData = Dict[str, Dict[int, List[Tuple[int, str]]]]


def load_book_directory(source: Path) -> CorpusData:
    """Load a directory of per-book JSON files."""
    corpus: CorpusData = {}
    for path in sorted(source.glob("*.json")):
        book = lookup(path.stem)
        if book is None:
            logger.warning(f"Skipping {path.name}: not a canonical book name")
            continue
        with open(path, "r", encoding="utf-8") as f:
            chapters = json.load(f)
        corpus[book.key] = {
            int(chapter): [(int(v["number"]), str(v["text"])) for v in verses]
            for chapter, verses in chapters.items()
        }
        logger.debug(f"Loaded {path.name}: {len(chapters)} chapters")
    return corpus


def load_verse_list(source: Path) -> CorpusData:
    """Load a single JSON file holding a flat list of verses."""
    with open(source, "r", encoding="utf-8") as f:
        rows = json.load(f)
    corpus: CorpusData = defaultdict(lambda: defaultdict(list))
    skipped = set()
    for row in rows:
        name = str(row.get("book_name") or row.get("book") or "")
        book = lookup(name)
        if book is None:
            skipped.add(name)
            continue
        corpus[book.key][int(row["chapter"])].append((int(row["verse"]), str(row["text"])))
    for name in sorted(skipped):
        logger.warning(f"Skipping unknown book: {name!r}")
    return {key: dict(chapters) for key, chapters in corpus.items()}


def write_corpus(output: Path, corpus: CorpusData, translation: str = "") -> int:
    """
    Write corpus data to a new SQLite asset.

    Books are written in canonical order with contiguous ordinals 1..N.

    Args:
        output: Destination database path (must not exist)
        corpus: book key -> chapter -> [(verse, text)]
        translation: Translation name stored in the meta table

    Returns:
        Number of verses written
    """
    books = sorted((lookup(key) for key in corpus), key=lambda b: b.ordinal)
    output.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(output))
    try:
        connection.executescript(CREATE_TABLES)
        connection.executemany(
            "INSERT INTO meta (k, v) VALUES (?, ?)",
            [(META_SCHEMA_VERSION, config.CORPUS_SCHEMA_VERSION), (META_TRANSLATION, translation)]
        )
        total = 0
        for ordinal, book in enumerate(books, start=1):
            connection.execute(
                "INSERT INTO books (ordinal, id, name, testament) VALUES (?, ?, ?, ?)",
                (ordinal, book.key, book.name, book.testament.value)
            )
            chapters = corpus[book.key]
            if len(chapters) != book.chapters:
                logger.warning(f"{book.name}: {len(chapters)} chapters, canon expects {book.chapters}")
            rows = [
                (book.key, chapter, verse, text.strip())
                for chapter, verses in sorted(chapters.items())
                for verse, text in verses
            ]
            connection.executemany(
                "INSERT INTO verses (book_id, chapter, verse, text) VALUES (?, ?, ?, ?)",
                rows
            )
            total += len(rows)
        connection.commit()
    finally:
        connection.close()
    return total


def main():
    """Build the corpus database."""
    parser = argparse.ArgumentParser(
        description="Build the bundled Bible corpus SQLite database"
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Directory of per-book JSON files, or a JSON file with a list of verses"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output database path (default: config.CORPUS_DB_PATH)"
    )
    parser.add_argument(
        "--translation", "-t",
        default="",
        help="Translation name stored in the asset, e.g. KJV"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite an existing database"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    output = args.output or config.CORPUS_DB_PATH
    if not args.source.exists():
        logger.error(f"Source not found: {args.source}")
        return 1
    if output.exists():
        if not args.force:
            logger.error(f"{output} already exists (use --force to overwrite)")
            return 1
        output.unlink()

    corpus = load_book_directory(args.source) if args.source.is_dir() else load_verse_list(args.source)
    if not corpus:
        logger.error("No canonical books found in source")
        return 1

    total = write_corpus(output, corpus, args.translation)
    logger.info(f"Wrote {len(corpus)} books, {total} verses to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
