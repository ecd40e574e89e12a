"""Application configuration and constants."""
import os
from pathlib import Path

# Directory paths
BASE_DIR = Path(__file__).resolve().parent.parent

# Database location (override with TIDBUM_DATABASE_PATH)
DATABASE_PATH = Path(os.environ.get("TIDBUM_DATABASE_PATH", str(BASE_DIR / "tidbum.db")))

# Identifier generation: fresh ids tried per insert before giving up
ID_RETRY_LIMIT = int(os.environ.get("TIDBUM_ID_RETRY_LIMIT", "5"))

# Connection handling
READER_POOL_SIZE = int(os.environ.get("TIDBUM_READER_POOL_SIZE", "4"))
BUSY_TIMEOUT = float(os.environ.get("TIDBUM_BUSY_TIMEOUT", "5.0"))  # seconds

# Logging
LOG_LEVEL = os.environ.get("TIDBUM_LOG_LEVEL", "INFO").upper()

# Ordering: first asset in an album gets this order_index
ORDER_INDEX_BASE = 0

# SQLite caps bound parameters per statement (999 on older builds)
SQLITE_MAX_PARAMS = 900

# Form-level limits enforced by collaborators (the store trusts them)
ALBUM_NAME_MAX_LENGTH = 50
ALBUM_DESCRIPTION_MAX_LENGTH = 200
