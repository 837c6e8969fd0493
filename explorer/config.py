"""Configuration settings for the file explorer server."""

import os

DATA_FILE = os.environ.get("EXPLORER_DATA_FILE") or None

SEED_FILE = os.environ.get("EXPLORER_SEED_FILE") or None

EXPLORER_HOST = os.environ.get("EXPLORER_HOST", "127.0.0.1")

EXPLORER_PORT = int(os.environ.get("EXPLORER_PORT", "8000"))

LOGFILE = os.environ.get("EXPLORER_LOGFILE") or None

RECENT_FILES_LIMIT = 20

MAX_SEARCH_RESULTS = 50
