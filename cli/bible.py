#!/usr/bin/env python3
"""
CLI tool for reading and searching the bundled Bible corpus.

Usage:
    python -m cli.bible books --testament nt
    python -m cli.bible chapter john 3
    python -m cli.bible verse genesis 1 1
    python -m cli.bible search "in the beginning" --testament ot
    python -m cli.bible random
    python -m cli.bible stats

Features:
    - Book listing per testament
    - Chapter and single-verse lookup
    - Accent and case insensitive search with testament/book filters
    - Corpus statistics
"""
import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

import config
from errors import BibleStoreError
from models import SearchResult, Verse
from scripture.bible_store import BibleStore
from scripture.corpus_loader import CorpusLoader

console = Console()


def print_info(message: str):
    """Print info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_error(message: str):
    """Print error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str):
    """Print warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def render_verses(title: str, verses: List[Verse]):
    table = Table(title=title, show_header=False, box=None)
    table.add_column("Verse", style="cyan", justify="right")
    table.add_column("Text", style="white")
    for verse in verses:
        table.add_row(str(verse.number), verse.text)
    console.print(table)


def render_results(query: str, results: List[SearchResult]):
    table = Table(title=f"Results for '{query}' ({len(results)})")
    table.add_column("Reference", style="cyan", no_wrap=True)
    table.add_column("Text", style="white")
    for result in results:
        table.add_row(f"{result.book} {result.chapter}:{result.verse}", result.text)
    console.print(table)


async def run(args) -> int:
    """Open the store, run one command, close the store."""
    store = BibleStore(loader=CorpusLoader(db_path=args.db))
    try:
        await store.initialize_bible_data()
    except BibleStoreError as e:
        print_error(str(e))
        return 1

    try:
        if args.command == "books":
            table = Table(title="Books")
            table.add_column("#", style="cyan", justify="right")
            table.add_column("ID", style="white")
            table.add_column("Name", style="white")
            table.add_column("Testament", style="yellow")
            table.add_column("Chapters", style="green", justify="right")
            for book in store.get_all_books(args.testament):
                table.add_row(
                    str(book.ordinal), book.id, book.name, book.testament.value, str(book.chapter_count)
                )
            console.print(table)

        elif args.command == "chapter":
            verses = await store.get_chapter(args.book, args.chapter)
            if not verses:
                print_warning(f"No such chapter: {args.book} {args.chapter}")
                return 1
            render_verses(f"{args.book} {args.chapter}", verses)

        elif args.command == "verse":
            verse = await store.get_verse(args.book, args.chapter, args.verse)
            if verse is None:
                print_warning(f"No such verse: {args.book} {args.chapter}:{args.verse}")
                return 1
            render_verses(f"{args.book} {args.chapter}", [verse])

        elif args.command == "search":
            results = await store.search_bible(args.query, args.testament, args.book)
            if not results:
                print_info(f"No verses match '{args.query}'")
                return 0
            render_results(args.query, results)

        elif args.command == "random":
            reference = await store.get_random_verse()
            if reference is None:
                print_warning("Corpus is empty")
                return 1
            console.print(
                f"[cyan]{reference.book} {reference.chapter}:{reference.verse}[/cyan] {reference.text}"
            )

        elif args.command == "stats":
            stats = store.corpus_stats()
            table = Table(title="Corpus")
            table.add_column("Field", style="cyan")
            table.add_column("Value", style="white")
            table.add_row("Translation", stats.translation or "-")
            table.add_row("Books", str(stats.total_books))
            table.add_row("Chapters", str(stats.total_chapters))
            table.add_row("Verses", str(stats.total_verses))
            table.add_row("Testaments", ", ".join(stats.testaments))
            console.print(table)
    except (BibleStoreError, ValueError) as e:
        print_error(str(e))
        return 1
    finally:
        store.close_bible_database()
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bible corpus reader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s books --testament ot
  %(prog)s chapter psalms 23
  %(prog)s verse john 3 16
  %(prog)s search "amor" --testament nt
        """
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=config.CORPUS_DB_PATH,
        help=f"Corpus database (default: {config.CORPUS_DB_PATH})"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    books = subparsers.add_parser("books", help="List books")
    books.add_argument(
        "--testament", "-t",
        choices=["all", "ot", "nt"],
        default="all",
        help="Testament filter (default: all)"
    )

    chapter = subparsers.add_parser("chapter", help="Show a chapter")
    chapter.add_argument("book", help="Book id, e.g. genesis or '1 samuel'")
    chapter.add_argument("chapter", type=int)

    verse = subparsers.add_parser("verse", help="Show a single verse")
    verse.add_argument("book")
    verse.add_argument("chapter", type=int)
    verse.add_argument("verse", type=int)

    search = subparsers.add_parser("search", help="Search verse text")
    search.add_argument("query")
    search.add_argument(
        "--testament", "-t",
        choices=["all", "ot", "nt"],
        default="all",
        help="Testament filter (default: all)"
    )
    search.add_argument("--book", "-b", default=None, help="Restrict to one book")

    subparsers.add_parser("random", help="Show a random verse")
    subparsers.add_parser("stats", help="Show corpus statistics")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
