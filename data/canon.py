"""
Canonical book table for the 66-book Protestant canon.

This module contains:
1. The canonical order of books (Old Testament, then New Testament)
2. English display names and canonical keys
3. Expected chapter counts
4. Aliases, including the Spanish file names used by RVR1960 source data

Keys follow the book-id normalization rule: lowercase, no whitespace,
no hyphens ("1 Samuel" -> "1samuel").
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Testament
from scripture.normalize import normalize_book_id


@dataclass(frozen=True)
class CanonBook:
    """Metadata for a canonical book."""
    ordinal: int
    key: str
    name: str
    testament: Testament
    chapters: int
    aliases: Tuple[str, ...] = ()


_OT = Testament.OLD
_NT = Testament.NEW

# ============================================================================
# CANON TABLE
# ============================================================================

CANON: Tuple[CanonBook, ...] = (
    # Old Testament
    CanonBook(1, "genesis", "Genesis", _OT, 50, ("gen", "génesis")),
    CanonBook(2, "exodus", "Exodus", _OT, 40, ("exo", "éxodo", "exodo")),
    CanonBook(3, "leviticus", "Leviticus", _OT, 27, ("lev", "levítico", "levitico")),
    CanonBook(4, "numbers", "Numbers", _OT, 36, ("num", "números", "numeros")),
    CanonBook(5, "deuteronomy", "Deuteronomy", _OT, 34, ("deut", "deuteronomio")),
    CanonBook(6, "joshua", "Joshua", _OT, 24, ("josh", "josué", "josue")),
    CanonBook(7, "judges", "Judges", _OT, 21, ("judg", "jueces")),
    CanonBook(8, "ruth", "Ruth", _OT, 4, ("rut",)),
    CanonBook(9, "1samuel", "1 Samuel", _OT, 31, ("1sam",)),
    CanonBook(10, "2samuel", "2 Samuel", _OT, 24, ("2sam",)),
    CanonBook(11, "1kings", "1 Kings", _OT, 22, ("1kgs", "1reyes")),
    CanonBook(12, "2kings", "2 Kings", _OT, 25, ("2kgs", "2reyes")),
    CanonBook(13, "1chronicles", "1 Chronicles", _OT, 29, ("1chr", "1crónicas", "1cronicas")),
    CanonBook(14, "2chronicles", "2 Chronicles", _OT, 36, ("2chr", "2crónicas", "2cronicas")),
    CanonBook(15, "ezra", "Ezra", _OT, 10, ("esdras",)),
    CanonBook(16, "nehemiah", "Nehemiah", _OT, 13, ("neh", "nehemías", "nehemias")),
    CanonBook(17, "esther", "Esther", _OT, 10, ("est", "ester")),
    CanonBook(18, "job", "Job", _OT, 42),
    CanonBook(19, "psalms", "Psalms", _OT, 150, ("psalm", "ps", "salmos")),
    CanonBook(20, "proverbs", "Proverbs", _OT, 31, ("prov", "proverbios")),
    CanonBook(21, "ecclesiastes", "Ecclesiastes", _OT, 12, ("eccl", "eclesiastés", "eclesiastes")),
    CanonBook(22, "songofsolomon", "Song of Solomon", _OT, 8, ("songofsongs", "song", "cantares")),
    CanonBook(23, "isaiah", "Isaiah", _OT, 66, ("isa", "isaías", "isaias")),
    CanonBook(24, "jeremiah", "Jeremiah", _OT, 52, ("jer", "jeremías", "jeremias")),
    CanonBook(25, "lamentations", "Lamentations", _OT, 5, ("lam", "lamentaciones")),
    CanonBook(26, "ezekiel", "Ezekiel", _OT, 48, ("ezek", "ezequiel")),
    CanonBook(27, "daniel", "Daniel", _OT, 12, ("dan",)),
    CanonBook(28, "hosea", "Hosea", _OT, 14, ("hos", "oseas")),
    CanonBook(29, "joel", "Joel", _OT, 3),
    CanonBook(30, "amos", "Amos", _OT, 9, ("amós",)),
    CanonBook(31, "obadiah", "Obadiah", _OT, 1, ("obad", "abdías", "abdias")),
    CanonBook(32, "jonah", "Jonah", _OT, 4, ("jon", "jonás", "jonas")),
    CanonBook(33, "micah", "Micah", _OT, 7, ("mic", "miqueas")),
    CanonBook(34, "nahum", "Nahum", _OT, 3, ("nah", "nahúm")),
    CanonBook(35, "habakkuk", "Habakkuk", _OT, 3, ("hab", "habacuc")),
    CanonBook(36, "zephaniah", "Zephaniah", _OT, 3, ("zeph", "sofonías", "sofonias")),
    CanonBook(37, "haggai", "Haggai", _OT, 2, ("hag", "hageo")),
    CanonBook(38, "zechariah", "Zechariah", _OT, 14, ("zech", "zacarías", "zacarias")),
    CanonBook(39, "malachi", "Malachi", _OT, 4, ("mal", "malaquías", "malaquias")),

    # New Testament
    CanonBook(40, "matthew", "Matthew", _NT, 28, ("matt", "mateo")),
    CanonBook(41, "mark", "Mark", _NT, 16, ("marcos",)),
    CanonBook(42, "luke", "Luke", _NT, 24, ("lucas",)),
    CanonBook(43, "john", "John", _NT, 21, ("juan",)),
    CanonBook(44, "acts", "Acts", _NT, 28, ("hechos",)),
    CanonBook(45, "romans", "Romans", _NT, 16, ("rom", "romanos")),
    CanonBook(46, "1corinthians", "1 Corinthians", _NT, 16, ("1cor", "1corintios")),
    CanonBook(47, "2corinthians", "2 Corinthians", _NT, 13, ("2cor", "2corintios")),
    CanonBook(48, "galatians", "Galatians", _NT, 6, ("gal", "gálatas", "galatas")),
    CanonBook(49, "ephesians", "Ephesians", _NT, 6, ("eph", "efesios")),
    CanonBook(50, "philippians", "Philippians", _NT, 4, ("phil", "filipenses")),
    CanonBook(51, "colossians", "Colossians", _NT, 4, ("col", "colosenses")),
    CanonBook(52, "1thessalonians", "1 Thessalonians", _NT, 5, ("1thess", "1tesalonicenses")),
    CanonBook(53, "2thessalonians", "2 Thessalonians", _NT, 3, ("2thess", "2tesalonicenses")),
    CanonBook(54, "1timothy", "1 Timothy", _NT, 6, ("1tim", "1timoteo")),
    CanonBook(55, "2timothy", "2 Timothy", _NT, 4, ("2tim", "2timoteo")),
    CanonBook(56, "titus", "Titus", _NT, 3, ("tit", "tito")),
    CanonBook(57, "philemon", "Philemon", _NT, 1, ("phlm", "filemón", "filemon")),
    CanonBook(58, "hebrews", "Hebrews", _NT, 13, ("heb", "hebreos")),
    CanonBook(59, "james", "James", _NT, 5, ("jas", "santiago")),
    CanonBook(60, "1peter", "1 Peter", _NT, 5, ("1pet", "1pedro")),
    CanonBook(61, "2peter", "2 Peter", _NT, 3, ("2pet", "2pedro")),
    CanonBook(62, "1john", "1 John", _NT, 5, ("1juan",)),
    CanonBook(63, "2john", "2 John", _NT, 1, ("2juan",)),
    CanonBook(64, "3john", "3 John", _NT, 1, ("3juan",)),
    CanonBook(65, "jude", "Jude", _NT, 1, ("judas",)),
    CanonBook(66, "revelation", "Revelation", _NT, 22, ("rev", "apocalipsis")),
)

# ============================================================================
# LOOKUPS
# ============================================================================

BOOK_ORDER: List[str] = [book.key for book in CANON]

_BY_NAME: Dict[str, CanonBook] = {}
for _book in CANON:
    for _name in (_book.key, _book.name, *_book.aliases):
        _BY_NAME.setdefault(normalize_book_id(_name), _book)


def lookup(name: str) -> Optional[CanonBook]:
    """Find a canonical book by key, display name or alias."""
    return _BY_NAME.get(normalize_book_id(name))


def testament_books(testament: Testament) -> List[CanonBook]:
    """Canonical books of one testament, in order."""
    return [book for book in CANON if book.testament == testament]
