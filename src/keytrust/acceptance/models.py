"""
Shared dataclasses for the acceptance subsystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class AcceptanceResult:
    """Acceptance of a fingerprint, and whether an email is decided under it."""
    fingerprint_acceptance: str = ""
    email_decided: bool = False


@dataclass(frozen=True)
class CacheEntry:
    """Cached decision for one fingerprint.

    An empty decision with emails=None is a tombstone left by a delete.
    """
    fingerprint: str
    decision: str
    emails: Optional[FrozenSet[str]] = None

    @property
    def is_tombstone(self) -> bool:
        return not self.decision
