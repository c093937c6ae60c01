"""
Configuration settings for the Scripture Data Store.

Organized into logical sections:
1. Core Settings (paths, corpus asset)
2. Book Index
3. Chapter Cache / Preloading
4. Search
5. Logging
"""
import os
from pathlib import Path

# ============================================
# CORE SETTINGS
# ============================================

# Base directory
BASE_DIR = Path(__file__).parent

# Directory structure
DATA_DIR = BASE_DIR / "data"
LOGS_DIR = BASE_DIR / "logs"

# Bundled corpus asset (read-only, shipped with the application)
CORPUS_DB_PATH = DATA_DIR / "bible.db"

# Schema marker stored in the asset's meta table
CORPUS_SCHEMA_VERSION = "1"

# Run PRAGMA quick_check when opening the corpus
CORPUS_VERIFY_INTEGRITY = os.getenv("CORPUS_VERIFY_INTEGRITY", "true").lower() == "true"

# ============================================
# BOOK INDEX
# ============================================

# Minimum rapidfuzz score (0-100) for "did you mean" book suggestions
BOOK_SUGGESTION_MIN_SCORE = float(os.getenv("BOOK_SUGGESTION_MIN_SCORE", "75"))

# ============================================
# CHAPTER CACHE / PRELOADING
# ============================================

# Maximum number of chapters kept in memory (LRU)
CHAPTER_CACHE_CAPACITY = int(os.getenv("CHAPTER_CACHE_CAPACITY", "50"))

# Extra retries for a chapter read that failed with a storage error
CHAPTER_READ_RETRIES = int(os.getenv("CHAPTER_READ_RETRIES", "1"))

# Hot set preloaded at startup in addition to the first chapter of the first book.
# Format: "book:chapter,book:chapter"
_preload_env = os.getenv("PRELOAD_CHAPTERS", "john:3,psalms:23")
PRELOAD_CHAPTERS = [
    (item.split(":")[0].strip(), int(item.split(":")[1]))
    for item in _preload_env.split(",")
    if ":" in item
]

# ============================================
# SEARCH
# ============================================

SEARCH_MIN_QUERY_LENGTH = 3  # Shorter queries return no results without scanning
SEARCH_MAX_RESULTS = int(os.getenv("SEARCH_MAX_RESULTS", "100"))
SEARCH_CANCEL_CHECK_INTERVAL = 512  # Verses scanned between cancellation checks

# ============================================
# LOGGING
# ============================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_ENABLED = os.getenv("LOG_FILE_ENABLED", "false").lower() == "true"

# ============================================
# INITIALIZATION
# ============================================

if LOG_FILE_ENABLED:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Setup logging
import logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(),
        *([logging.FileHandler(LOGS_DIR / "bible_store.log")] if LOG_FILE_ENABLED else [])
    ]
)
