"""keytrust configuration.

KeyTrustConfig gathers the connection, cache and audit settings. Values come
from keytrust.config.defaults unless overridden by the environment (or a
.env file) through KeyTrustConfig.from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from keytrust.config.defaults import (
    AUDIT_ENABLED,
    AUDIT_LEVEL,
    BUSY_TIMEOUT_SECONDS,
    CACHE_CAPACITY,
    OPEN_DEADLINE_SECONDS,
    OPEN_RETRY_INTERVAL_SECONDS,
)
from keytrust.config.paths import get_audit_path, get_db_path

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class KeyTrustConfig:
    """Runtime settings for an AcceptanceStore.

    Attributes:
        db_path: Location of the acceptance database.
        open_deadline_seconds: How long opening keeps retrying a busy database.
        retry_interval_seconds: Pause between open attempts.
        busy_timeout_seconds: Engine-level wait for a held write lock.
        cache_capacity: Number of fingerprints the acceptance cache remembers.
        audit_enabled: Write a JSONL audit trail of successful mutations.
        audit_path: Audit file; defaults to a file next to the database.
        audit_level: Minimum audit level written.
    """

    db_path: Path = field(default_factory=get_db_path)
    open_deadline_seconds: float = OPEN_DEADLINE_SECONDS
    retry_interval_seconds: float = OPEN_RETRY_INTERVAL_SECONDS
    busy_timeout_seconds: float = BUSY_TIMEOUT_SECONDS
    cache_capacity: int = CACHE_CAPACITY
    audit_enabled: bool = AUDIT_ENABLED
    audit_path: Optional[Path] = None
    audit_level: str = AUDIT_LEVEL

    def __post_init__(self):
        self.db_path = Path(self.db_path)
        if self.cache_capacity < 1:
            raise ValueError(f"cache_capacity must be >= 1, got {self.cache_capacity}")
        if self.audit_path is None:
            self.audit_path = get_audit_path(self.db_path)
        else:
            self.audit_path = Path(self.audit_path)

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "KeyTrustConfig":
        """Create config from environment variables with defaults as fallbacks.

        A .env file is loaded first (the given one, or one found by
        python-dotenv); variables already set in the process win.
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            db_path=get_db_path(),
            open_deadline_seconds=float(os.environ.get(
                "KEYTRUST_OPEN_DEADLINE", str(OPEN_DEADLINE_SECONDS))),
            retry_interval_seconds=float(os.environ.get(
                "KEYTRUST_RETRY_INTERVAL", str(OPEN_RETRY_INTERVAL_SECONDS))),
            busy_timeout_seconds=float(os.environ.get(
                "KEYTRUST_BUSY_TIMEOUT", str(BUSY_TIMEOUT_SECONDS))),
            cache_capacity=int(os.environ.get(
                "KEYTRUST_CACHE_CAPACITY", str(CACHE_CAPACITY))),
            audit_enabled=os.environ.get(
                "KEYTRUST_AUDIT", str(AUDIT_ENABLED)).strip().lower() in _TRUTHY,
            audit_level=os.environ.get("KEYTRUST_AUDIT_LEVEL", AUDIT_LEVEL).upper(),
        )


__all__ = ["KeyTrustConfig"]
