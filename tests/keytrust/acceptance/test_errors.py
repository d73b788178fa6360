"""Tests for error kinds, Outcome and fingerprint normalization."""

import sqlite3

import pytest

from keytrust.acceptance.errors import (
    DuplicateEmail,
    ErrorKind,
    InvalidFingerprint,
    InvalidState,
    StorageUnavailable,
    capture,
    kind_of,
)
from keytrust.acceptance.fingerprint import (
    normalize_email,
    normalize_fingerprint,
    unique_emails,
)


class TestNormalizeFingerprint:

    def test_lowercases(self):
        assert normalize_fingerprint("ABCDEF" * 6 + "ABCD") == ("abcdef" * 6 + "abcd")

    def test_legacy_length(self):
        assert normalize_fingerprint("F" * 32) == "f" * 32

    @pytest.mark.parametrize("value", ["a" * 31, "a" * 33, "a" * 39, "a" * 41, "z" * 40, None])
    def test_invalid(self, value):
        with pytest.raises(InvalidFingerprint):
            normalize_fingerprint(value)

    def test_invalid_fingerprint_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_fingerprint("short")


def test_normalize_email():
    assert normalize_email("Alice@Example.COM") == "alice@example.com"


def test_unique_emails():
    assert unique_emails(["a@x", "A@X", None, "", "b@y", "a@x"]) == ["a@x", "b@y"]
    assert unique_emails(None) == []


class TestKindOf:

    def test_acceptance_errors(self):
        assert kind_of(InvalidFingerprint("x")) is ErrorKind.INVALID_FINGERPRINT
        assert kind_of(InvalidState("f", "rejected", "op")) is ErrorKind.INVALID_STATE
        assert kind_of(DuplicateEmail("f", "e")) is ErrorKind.DUPLICATE_EMAIL
        assert kind_of(StorageUnavailable("db", 3)) is ErrorKind.STORAGE_UNAVAILABLE

    def test_engine_error(self):
        assert kind_of(sqlite3.OperationalError("disk I/O error")) is ErrorKind.STORAGE_ERROR

    def test_foreign_error(self):
        with pytest.raises(TypeError):
            kind_of(KeyError("x"))


@pytest.mark.asyncio
async def test_capture_success():
    async def op():
        return 42

    outcome = await capture(op())

    assert outcome.ok
    assert outcome.value == 42
    assert outcome.kind is None


@pytest.mark.asyncio
async def test_capture_storage_error():
    async def op():
        raise sqlite3.OperationalError("disk I/O error")

    outcome = await capture(op())

    assert outcome.kind is ErrorKind.STORAGE_ERROR


@pytest.mark.asyncio
async def test_capture_does_not_hide_other_errors():
    async def op():
        raise KeyError("x")

    with pytest.raises(KeyError):
        await capture(op())


def test_error_messages():
    assert "already has acceptance" in str(DuplicateEmail("abc", "a@example.com"))
    assert "rejected" in str(InvalidState("abc", "rejected", "add_accepted_email"))
    assert "3" in str(StorageUnavailable("db", 3))
