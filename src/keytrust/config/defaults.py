"""Default configuration values for keytrust.

All tunable numbers live here so the connection, cache and audit modules
never hard-code them.

Usage:
    from keytrust.config.defaults import (
        OPEN_DEADLINE_SECONDS,
        OPEN_RETRY_INTERVAL_SECONDS,
    )
"""

from __future__ import annotations

# =============================================================================
# Database
# =============================================================================

DB_FILENAME = "openpgp.sqlite"
PROFILE_DIRNAME = ".keytrust"


# =============================================================================
# Connection Defaults
# =============================================================================

# How long open_connection keeps retrying a busy database
OPEN_DEADLINE_SECONDS = 10.0
OPEN_RETRY_INTERVAL_SECONDS = 0.1  # 100 ms between attempts

# Engine-level wait for a held write lock, per statement
BUSY_TIMEOUT_SECONDS = 5.0

# sqlite3.OperationalError messages treated as transient contention
BUSY_ERROR_MARKERS = (
    "database is locked",
    "database is busy",
    "database table is locked",
)


# =============================================================================
# Cache Defaults
# =============================================================================

# One slot: the cache only ever describes the last touched fingerprint
CACHE_CAPACITY = 1


# =============================================================================
# Audit Defaults
# =============================================================================

AUDIT_ENABLED = False
AUDIT_LOG_FILENAME = "acceptance_audit.jsonl"
AUDIT_LEVEL = "INFO"  # "DEBUG", "INFO", "WARN", "ERROR"
