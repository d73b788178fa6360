"""
Acceptance error taxonomy.

Every failure an AcceptanceStore operation can raise maps to one ErrorKind.
Callers that prefer branching over catching wrap the call in capture():

    outcome = await capture(store.add_accepted_email(fpr, email))
    if outcome.kind is ErrorKind.DUPLICATE_EMAIL:
        ...
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Optional

# Engine failures other than busy-past-deadline propagate unchanged
StorageError = sqlite3.Error


class ErrorKind(str, Enum):
    """Named error kinds."""
    INVALID_FINGERPRINT = "invalid_fingerprint"
    INVALID_STATE = "invalid_state"
    DUPLICATE_EMAIL = "duplicate_email"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    STORAGE_ERROR = "storage_error"


class AcceptanceError(Exception):
    """Base exception for acceptance operations."""
    kind: ErrorKind = ErrorKind.STORAGE_ERROR


class InvalidFingerprint(AcceptanceError, ValueError):
    """Raised when a fingerprint is not 32 or 40 hex characters."""
    kind = ErrorKind.INVALID_FINGERPRINT

    def __init__(self, fingerprint: str):
        self.fingerprint = fingerprint
        super().__init__(f"Invalid fingerprint: {fingerprint!r}")


class InvalidState(AcceptanceError):
    """Raised when an operation is not allowed for the current decision."""
    kind = ErrorKind.INVALID_STATE

    def __init__(self, fingerprint: str, decision: str, operation: str):
        self.fingerprint = fingerprint
        self.decision = decision
        self.operation = operation
        super().__init__(
            f"invalid use of {operation}() with existing acceptance "
            f"{decision!r} for {fingerprint}"
        )


class DuplicateEmail(AcceptanceError):
    """Raised when an email already has acceptance for a fingerprint."""
    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, fingerprint: str, email: str):
        self.fingerprint = fingerprint
        self.email = email
        super().__init__(f"{email} already has acceptance for {fingerprint}")


class StorageUnavailable(AcceptanceError):
    """Raised when the database stays busy past the open deadline."""
    kind = ErrorKind.STORAGE_UNAVAILABLE

    def __init__(self, path: str, attempts: int):
        self.path = path
        self.attempts = attempts
        super().__init__(
            f"Database {path} still busy after {attempts} open attempts"
        )


def kind_of(error: BaseException) -> ErrorKind:
    """Map an exception raised by the store to its ErrorKind."""
    if isinstance(error, AcceptanceError):
        return error.kind
    if isinstance(error, StorageError):
        return ErrorKind.STORAGE_ERROR
    raise TypeError(f"{type(error).__name__} is not an acceptance error") from error


@dataclass(frozen=True)
class Outcome:
    """Result of an acceptance operation: a value or a named error kind."""
    value: Any = None
    kind: Optional[ErrorKind] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.kind is None


async def capture(operation: Awaitable[Any]) -> Outcome:
    """Await an operation and fold acceptance/storage errors into an Outcome.

    Anything that is not an acceptance or storage error still propagates.
    """
    try:
        value = await operation
    except (AcceptanceError, StorageError) as e:
        return Outcome(kind=kind_of(e), error=e)
    return Outcome(value=value)
