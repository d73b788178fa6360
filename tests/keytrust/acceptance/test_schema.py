"""Tests for the acceptance schema manager."""

import sqlite3

import pytest

from keytrust.acceptance.connection import open_connection
from keytrust.acceptance.schema import ensure_schema, table_exists


@pytest.fixture
async def conn(tmp_path):
    conn = await open_connection(tmp_path / "schema.sqlite")
    yield conn
    await conn.close()


async def _objects(conn, kind):
    async with conn.execute(
        "SELECT name FROM sqlite_master WHERE type = ? ORDER BY name", (kind,)
    ) as cursor:
        return [row[0] for row in await cursor.fetchall()]


@pytest.mark.asyncio
async def test_creates_tables_and_indexes(conn):
    assert await ensure_schema(conn) is True

    assert await _objects(conn, "table") == ["acceptance_decision", "acceptance_email"]
    indexes = await _objects(conn, "index")
    assert "acceptance_email_i1" in indexes
    assert "acceptance__decision_i1" in indexes


@pytest.mark.asyncio
async def test_idempotent(conn):
    await ensure_schema(conn)
    await conn.execute("INSERT INTO acceptance_decision VALUES ('abc', 'verified')")

    assert await ensure_schema(conn) is False

    async with conn.execute("SELECT count(*) FROM acceptance_decision") as cursor:
        assert (await cursor.fetchone())[0] == 1


@pytest.mark.asyncio
async def test_half_present_schema_is_completed(conn):
    """Only one table present: both are (re)created, existing rows survive."""
    await conn.execute(
        "create table acceptance_decision (fpr text not null, decision text not null, unique(fpr))"
    )
    await conn.execute("INSERT INTO acceptance_decision VALUES ('abc', 'rejected')")

    assert await ensure_schema(conn) is True

    assert await table_exists(conn, "acceptance_email")
    async with conn.execute("SELECT decision FROM acceptance_decision") as cursor:
        assert (await cursor.fetchone())[0] == "rejected"


@pytest.mark.asyncio
async def test_unique_constraints(conn):
    await ensure_schema(conn)
    await conn.execute("INSERT INTO acceptance_email VALUES ('abc', 'a@example.com')")

    with pytest.raises(sqlite3.IntegrityError):
        await conn.execute("INSERT INTO acceptance_email VALUES ('abc', 'a@example.com')")

    await conn.execute("INSERT INTO acceptance_decision VALUES ('abc', 'verified')")
    with pytest.raises(sqlite3.IntegrityError):
        await conn.execute("INSERT INTO acceptance_decision VALUES ('abc', 'rejected')")


@pytest.mark.asyncio
async def test_table_exists(conn):
    assert not await table_exists(conn, "acceptance_email")
    await ensure_schema(conn)
    assert await table_exists(conn, "acceptance_email")
