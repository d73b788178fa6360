"""
keytrust acceptance subsystem.

Stores, per OpenPGP key fingerprint, whether the key is undecided,
unverified, verified, rejected or accepted as a personal key, and which
email addresses are decided-for under it.
"""

from __future__ import annotations

from .auditor import AcceptanceAuditor, AuditLevel
from .cache import AcceptanceCache
from .connection import open_connection
from .constants import Decision
from .errors import (
    AcceptanceError,
    DuplicateEmail,
    ErrorKind,
    InvalidFingerprint,
    InvalidState,
    Outcome,
    StorageError,
    StorageUnavailable,
    capture,
)
from .events import AcceptanceNotifier
from .models import AcceptanceResult, CacheEntry
from .schema import ensure_schema
from .store import AcceptanceStore, SecretKeyLookup

__all__ = [
    "AcceptanceStore",
    "AcceptanceCache",
    "AcceptanceNotifier",
    "AcceptanceAuditor",
    "AuditLevel",
    "AcceptanceResult",
    "CacheEntry",
    "Decision",
    "SecretKeyLookup",
    "open_connection",
    "ensure_schema",
    "AcceptanceError",
    "InvalidFingerprint",
    "InvalidState",
    "DuplicateEmail",
    "StorageUnavailable",
    "StorageError",
    "ErrorKind",
    "Outcome",
    "capture",
]
