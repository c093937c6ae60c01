"""
Data directory for canon metadata and the bundled corpus asset (bible.db).
"""
from data.canon import CanonBook, CANON, BOOK_ORDER, lookup, testament_books

__all__ = [
    'CanonBook',
    'CANON',
    'BOOK_ORDER',
    'lookup',
    'testament_books',
]
