"""
Text normalization helpers.

- Book identifiers: lowercase, whitespace and hyphens removed, so that
  "1 Samuel", "1-samuel" and "1samuel" resolve to the same key.
- Search text: lowercase with diacritics folded (NFKD, combining marks
  dropped), so that "José" and "jose" compare equal.
"""
import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_book_id(book_id: str) -> str:
    """Collapse naming variants of a book identifier to its canonical key."""
    if not book_id:
        return ""
    return _WHITESPACE_RE.sub("", book_id.lower()).replace("-", "")


def fold_text(text: str) -> str:
    """Lowercase and strip diacritics for accent-insensitive comparison."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_query(query: str) -> str:
    """Trim, collapse internal whitespace and fold a search query."""
    if not query:
        return ""
    return fold_text(" ".join(query.split()))
