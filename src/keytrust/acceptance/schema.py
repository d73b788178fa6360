"""
Schema manager for the acceptance tables.
"""

from __future__ import annotations

import logging

import aiosqlite

from .constants import DECISION_TABLE, EMAIL_TABLE

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    f"create table if not exists {EMAIL_TABLE} ("
    "fpr text not null, "
    "email text not null, "
    "unique(fpr, email))",
    f"create table if not exists {DECISION_TABLE} ("
    "fpr text not null, "
    "decision text not null, "
    "unique(fpr))",
    f"create unique index if not exists acceptance_email_i1 on {EMAIL_TABLE}(fpr, email)",
    f"create unique index if not exists acceptance__decision_i1 on {DECISION_TABLE}(fpr)",
)


async def table_exists(conn: aiosqlite.Connection, name: str) -> bool:
    """Check sqlite_master for a table."""
    async with conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ) as cursor:
        return await cursor.fetchone() is not None


async def ensure_schema(conn: aiosqlite.Connection) -> bool:
    """
    Create both acceptance tables and their unique indexes if either is missing.

    A database holding only one of the tables is treated like an empty one:
    both tables and indexes are (re)created, leaving the existing table as is.

    Returns:
        True if the schema had to be created.
    """
    if await table_exists(conn, EMAIL_TABLE) and await table_exists(conn, DECISION_TABLE):
        return False

    await conn.execute("BEGIN IMMEDIATE")
    try:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
        await conn.execute("COMMIT")
    except Exception:
        if conn.in_transaction:
            await conn.execute("ROLLBACK")
        raise

    logger.info("Created acceptance schema")
    return True
