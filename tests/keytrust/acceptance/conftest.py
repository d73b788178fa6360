"""Shared fixtures for acceptance tests."""

import pytest

from keytrust.acceptance.store import AcceptanceStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "profile" / "openpgp.sqlite"


@pytest.fixture
async def store(db_path):
    """An initialized AcceptanceStore on a temp database."""
    store = AcceptanceStore(db_path)
    await store.initialize()
    return store


@pytest.fixture
def fresh_store(db_path):
    """A second store on the same database, with an empty cache."""
    return AcceptanceStore(db_path)
