"""Fingerprint and email normalization."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .constants import FINGERPRINT_LENGTHS
from .errors import InvalidFingerprint

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def normalize_fingerprint(fingerprint: str) -> str:
    """Validate a fingerprint and return it lowercased.

    40 characters is a modern fingerprint, 32 a legacy one.

    Raises:
        InvalidFingerprint: wrong length or non-hex characters.
    """
    if (
        not isinstance(fingerprint, str)
        or len(fingerprint) not in FINGERPRINT_LENGTHS
        or not _HEX_RE.match(fingerprint)
    ):
        raise InvalidFingerprint(fingerprint)
    return fingerprint.lower()


def normalize_email(email: str) -> str:
    return email.lower()


def unique_emails(emails: Optional[Iterable[Optional[str]]]) -> List[str]:
    """Lowercase and dedupe emails, keeping first-seen order.

    A key can carry several user IDs with the same address; each address is
    kept once. Empty entries are dropped.
    """
    seen = set()
    result: List[str] = []
    for email in emails or ():
        if not email:
            continue
        email = normalize_email(email)
        if email in seen:
            continue
        seen.add(email)
        result.append(email)
    return result
