"""
Acceptance decisions and the table names they are stored in.
"""

from __future__ import annotations

from enum import Enum


class Decision(str, Enum):
    """Acceptance decision for a key fingerprint."""
    UNDECIDED = "undecided"
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"
    PERSONAL = "personal"


# Value reported for a fingerprint without a decision row
NO_DECISION = ""

# Decisions that count as a positively accepted key for an email
POSITIVELY_ACCEPTED = frozenset({Decision.UNVERIFIED.value, Decision.VERIFIED.value})

# Current decisions add_accepted_email may build on
UNDECIDED_STATES = frozenset({NO_DECISION, Decision.UNDECIDED.value})
ADD_EMAIL_STATES = UNDECIDED_STATES | POSITIVELY_ACCEPTED

EMAIL_TABLE = "acceptance_email"
DECISION_TABLE = "acceptance_decision"

FINGERPRINT_LENGTHS = (32, 40)  # v3 (legacy) and v4 fingerprints
