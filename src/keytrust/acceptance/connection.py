"""
Connection manager for the acceptance database.

Every call opens an independent aiosqlite connection; nothing is pooled and
callers close what they open. Opening retries while the engine reports the
database as busy, until a deadline taken at call time has passed.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional, Sequence, Union

import aiosqlite

from keytrust.config.defaults import (
    BUSY_ERROR_MARKERS,
    BUSY_TIMEOUT_SECONDS,
    OPEN_DEADLINE_SECONDS,
    OPEN_RETRY_INTERVAL_SECONDS,
)

from .errors import StorageUnavailable

logger = logging.getLogger(__name__)


def deadline_after(seconds: float = OPEN_DEADLINE_SECONDS) -> float:
    """Deadline (time.monotonic() based) `seconds` from now."""
    return time.monotonic() + seconds


def is_busy_error(error: BaseException, markers: Sequence[str] = BUSY_ERROR_MARKERS) -> bool:
    """Check if an engine error is transient contention."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in markers)


async def close_quietly(conn: Optional[aiosqlite.Connection]) -> None:
    """Close a connection, swallowing close failures."""
    if conn is None:
        return
    try:
        await conn.close()
    except Exception as e:
        logger.debug(f"Ignoring error while closing connection: {e}")


async def open_connection(
    path: Union[str, Path],
    deadline: Optional[float] = None,
    *,
    retry_interval: float = OPEN_RETRY_INTERVAL_SECONDS,
    busy_timeout: float = BUSY_TIMEOUT_SECONDS,
    busy_markers: Sequence[str] = BUSY_ERROR_MARKERS,
) -> aiosqlite.Connection:
    """
    Open the database, retrying while it is busy.

    The connection runs in autocommit mode (isolation_level=None) so
    transactions are always explicit. A cheap probe query makes a locked
    database fail here rather than on first use.

    Args:
        path: Database file.
        deadline: time.monotonic() value after which a busy database is
            reported as unavailable. Defaults to OPEN_DEADLINE_SECONDS from now.
        retry_interval: Seconds to wait between attempts.
        busy_timeout: Engine-level lock wait applied to the connection.
        busy_markers: Error message fragments classified as transient.

    Returns:
        An open aiosqlite connection.

    Raises:
        StorageUnavailable: Still busy once the deadline has passed.
        sqlite3.Error: Any other engine failure, unchanged.
    """
    if deadline is None:
        deadline = deadline_after()

    attempts = 0
    while True:
        attempts += 1
        conn: Optional[aiosqlite.Connection] = None
        try:
            conn = await aiosqlite.connect(
                str(path), timeout=busy_timeout, isolation_level=None
            )
            conn.row_factory = aiosqlite.Row
            async with conn.execute("PRAGMA schema_version") as cursor:
                await cursor.fetchone()
            return conn
        except sqlite3.Error as e:
            await close_quietly(conn)
            if not is_busy_error(e, busy_markers):
                raise
            if time.monotonic() > deadline:
                logger.warning(
                    f"Giving up opening {path} after {attempts} attempts: {e}"
                )
                raise StorageUnavailable(str(path), attempts) from e
            logger.debug(
                f"Database {path} busy (attempt {attempts}), retrying in {retry_interval}s"
            )

        await asyncio.sleep(retry_interval)
