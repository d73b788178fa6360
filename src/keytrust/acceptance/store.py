"""
AcceptanceStore - Async SQLite store for OpenPGP key acceptance decisions.

Each fingerprint has at most one decision row and any number of accepted
email rows. Every mutation replaces a fingerprint's rows inside one
transaction, then notifies subscribers. Reads go through the cache first and
fall back to the database.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Iterable, List, Optional, Protocol, Union

import aiosqlite

from keytrust.config import KeyTrustConfig

from .auditor import AcceptanceAuditor
from .cache import AcceptanceCache
from .connection import close_quietly, deadline_after, open_connection
from .constants import (
    ADD_EMAIL_STATES,
    DECISION_TABLE,
    EMAIL_TABLE,
    NO_DECISION,
    UNDECIDED_STATES,
    Decision,
)
from .errors import DuplicateEmail, InvalidState
from .events import AcceptanceNotifier
from .fingerprint import normalize_email, normalize_fingerprint, unique_emails
from .models import AcceptanceResult
from .schema import ensure_schema

logger = logging.getLogger(__name__)


class SecretKeyLookup(Protocol):
    """Key ring capability: is there a usable secret key for an email?"""

    async def has_secret_key(self, email: str) -> bool:
        ...


async def _rollback_quietly(conn: aiosqlite.Connection) -> None:
    if not conn.in_transaction:
        return
    try:
        await conn.execute("ROLLBACK")
    except Exception as e:
        logger.debug(f"Ignoring rollback failure: {e}")


@asynccontextmanager
async def _transaction(conn: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    """BEGIN IMMEDIATE ... COMMIT, rolling back if the block or commit fails.

    IMMEDIATE takes the write lock up front, so concurrent writers queue on
    the engine's busy timeout instead of failing mid-transaction.
    """
    await conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        await conn.execute("COMMIT")
    except BaseException:
        await _rollback_quietly(conn)
        raise


class AcceptanceStore:
    """
    Trust decisions per key fingerprint.

    Async: all I/O goes through aiosqlite, one short-lived connection per call
    Consistent: rows for a fingerprint are replaced in a single transaction
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        *,
        config: Optional[KeyTrustConfig] = None,
        secret_keys: Optional[SecretKeyLookup] = None,
        notifier: Optional[AcceptanceNotifier] = None,
        auditor: Optional[AcceptanceAuditor] = None,
        cache: Optional[AcceptanceCache] = None,
    ):
        if config is None:
            config = KeyTrustConfig(db_path=db_path) if db_path else KeyTrustConfig()
        self.config = config
        self.db_path = Path(db_path) if db_path else config.db_path
        self.secret_keys = secret_keys
        self.notifier = notifier or AcceptanceNotifier()
        self.cache = cache or AcceptanceCache(config.cache_capacity)
        if auditor is None and config.audit_enabled:
            auditor = AcceptanceAuditor(config.audit_path, config.audit_level)
        self.auditor = auditor

        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Connections and schema
    # ------------------------------------------------------------------

    async def _open(self) -> aiosqlite.Connection:
        """Open a fresh connection, creating the schema on first use."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await open_connection(
            self.db_path,
            deadline_after(self.config.open_deadline_seconds),
            retry_interval=self.config.retry_interval_seconds,
            busy_timeout=self.config.busy_timeout_seconds,
        )
        if self._schema_ready:
            return conn

        try:
            async with self._schema_lock:
                if not self._schema_ready:
                    await ensure_schema(conn)
                    self._schema_ready = True
        except BaseException:
            await close_quietly(conn)
            raise
        return conn

    async def check_database_structure(self) -> None:
        """Open the database once and make sure both tables exist."""
        conn = None
        try:
            conn = await open_connection(
                self.db_path,
                deadline_after(self.config.open_deadline_seconds),
                retry_interval=self.config.retry_interval_seconds,
                busy_timeout=self.config.busy_timeout_seconds,
            )
            await ensure_schema(conn)
            self._schema_ready = True
        except Exception as e:
            logger.error(f"Check db structure FAILED: {e}")
            raise
        finally:
            await close_quietly(conn)

    async def initialize(self) -> None:
        """Create the profile directory and schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        await self.check_database_structure()
        logger.info(f"Initialized acceptance store at {self.db_path}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_fingerprint_acceptance(
        self,
        fingerprint: str,
        conn: Optional[aiosqlite.Connection] = None,
    ) -> str:
        """
        Decision stored for a fingerprint, or "" when there is none.

        Uses the given connection if any, otherwise opens (and closes) its own.
        Never writes to the cache.
        """
        fingerprint = normalize_fingerprint(fingerprint)

        entry = self.cache.lookup(fingerprint)
        if entry is not None:
            logger.debug(f"Acceptance cache hit for {fingerprint}")
            return entry.decision

        own_conn = conn is None
        if own_conn:
            conn = await self._open()
        try:
            return await self._stored_decision(conn, fingerprint)
        finally:
            if own_conn:
                await close_quietly(conn)

    async def _stored_decision(self, conn: aiosqlite.Connection, fingerprint: str) -> str:
        """Decision row straight from the database, bypassing the cache."""
        async with conn.execute(
            f"SELECT decision FROM {DECISION_TABLE} WHERE fpr = ?",
            (fingerprint,),
        ) as cursor:
            row = await cursor.fetchone()
        # row_factory is up to whoever opened conn
        return row[0] if row else NO_DECISION

    async def has_any_accepted_key_for_email(self, email: str) -> bool:
        """
        Check if some key with decision verified/unverified covers the email.

        Without one, an email we hold a usable secret key for counts as
        accepted (our own key, trusted on first use).
        """
        email = normalize_email(email)

        conn = await self._open()
        try:
            async with conn.execute(
                f"""
                SELECT count(decision) AS hits FROM {EMAIL_TABLE}
                INNER JOIN {DECISION_TABLE}
                    ON {DECISION_TABLE}.fpr = {EMAIL_TABLE}.fpr
                WHERE (decision = ? OR decision = ?)
                    AND lower(email) = ?
                """,
                (Decision.VERIFIED.value, Decision.UNVERIFIED.value, email),
            ) as cursor:
                row = await cursor.fetchone()
        finally:
            await close_quietly(conn)

        if row and row["hits"]:
            return True
        if self.secret_keys is None:
            return False
        return bool(await self.secret_keys.has_secret_key(email))

    async def get_acceptance(self, fingerprint: str, email: str) -> AcceptanceResult:
        """Acceptance of a fingerprint plus whether the email is decided under it."""
        fingerprint = normalize_fingerprint(fingerprint)
        email = normalize_email(email)

        entry = self.cache.lookup(fingerprint)
        if entry is not None and entry.emails is not None and email in entry.emails:
            logger.debug(f"Acceptance cache hit for {fingerprint} / {email}")
            return AcceptanceResult(entry.decision, True)

        conn = await self._open()
        try:
            acceptance = await self.get_fingerprint_acceptance(fingerprint, conn=conn)
            email_decided = False
            if acceptance:
                email_decided = await self._email_count(conn, fingerprint, email) > 0
        finally:
            await close_quietly(conn)

        return AcceptanceResult(acceptance, email_decided)

    async def get_accepted_emails(self, fingerprint: str) -> List[str]:
        """Emails decided-for under a fingerprint, sorted."""
        fingerprint = normalize_fingerprint(fingerprint)
        conn = await self._open()
        try:
            async with conn.execute(
                f"SELECT email FROM {EMAIL_TABLE} WHERE fpr = ? ORDER BY email",
                (fingerprint,),
            ) as cursor:
                rows = await cursor.fetchall()
        finally:
            await close_quietly(conn)
        return [r["email"] for r in rows]

    async def count_by_decision(self) -> Dict[str, int]:
        """Number of decision rows per decision value."""
        conn = await self._open()
        try:
            async with conn.execute(
                f"SELECT decision, count(*) AS n FROM {DECISION_TABLE} GROUP BY decision"
            ) as cursor:
                rows = await cursor.fetchall()
        finally:
            await close_quietly(conn)
        return {r["decision"]: r["n"] for r in rows}

    async def _email_count(
        self, conn: aiosqlite.Connection, fingerprint: str, email: str
    ) -> int:
        async with conn.execute(
            f"SELECT count(*) FROM {EMAIL_TABLE} WHERE fpr = ? AND email = ?",
            (fingerprint, email),
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _delete_rows(self, conn: aiosqlite.Connection, fingerprint: str) -> None:
        """Delete decision and email rows; caller owns the transaction."""
        await conn.execute(f"DELETE FROM {DECISION_TABLE} WHERE fpr = ?", (fingerprint,))
        await conn.execute(f"DELETE FROM {EMAIL_TABLE} WHERE fpr = ?", (fingerprint,))

    async def delete_acceptance(self, fingerprint: str) -> None:
        """Forget every decision for a fingerprint."""
        fingerprint = normalize_fingerprint(fingerprint)
        self.cache.tombstone(fingerprint)

        conn = None
        try:
            conn = await self._open()
            async with _transaction(conn):
                await self._delete_rows(conn, fingerprint)
        finally:
            await close_quietly(conn)

        logger.debug(f"Deleted acceptance for {fingerprint}")
        if self.auditor:
            await self.auditor.log_delete(fingerprint)
        await self.notifier.publish()

    async def add_accepted_email(self, fingerprint: str, email: str) -> None:
        """
        Add one accepted email to a fingerprint.

        An undecided key becomes unverified with just this email; an already
        accepted key (unverified/verified) gains the email.

        Raises:
            InvalidState: the key is rejected or personal.
            DuplicateEmail: the email is already accepted for the key.
        """
        fingerprint = normalize_fingerprint(fingerprint)
        email = normalize_email(email)

        self.cache.invalidate()

        conn = await self._open()
        try:
            async with _transaction(conn):
                # read under the write lock, never from the cache
                current = await self._stored_decision(conn, fingerprint)
                if current not in ADD_EMAIL_STATES:
                    raise InvalidState(fingerprint, current, "add_accepted_email")

                if current in UNDECIDED_STATES:
                    decision = Decision.UNVERIFIED.value
                    # start fresh, drop stale email rows
                    await self._delete_rows(conn, fingerprint)
                    await conn.execute(
                        f"INSERT INTO {DECISION_TABLE} VALUES (?, ?)",
                        (fingerprint, decision),
                    )
                else:
                    decision = current
                    if await self._email_count(conn, fingerprint, email):
                        raise DuplicateEmail(fingerprint, email)
                await conn.execute(
                    f"INSERT INTO {EMAIL_TABLE} VALUES (?, ?)",
                    (fingerprint, email),
                )
        finally:
            await close_quietly(conn)

        logger.debug(f"Accepted {email} for {fingerprint} ({decision})")
        if self.auditor:
            await self.auditor.log_add_email(fingerprint, decision, email)
        await self.notifier.publish()

    async def update_acceptance(
        self,
        fingerprint: str,
        emails: Optional[Iterable[Optional[str]]],
        decision: Union[str, Decision],
    ) -> None:
        """
        Replace the decision and email set of a fingerprint.

        undecided removes all rows; rejected keeps only the decision row.
        The cache is updated to the intended state before the transaction
        runs.
        """
        fingerprint = normalize_fingerprint(fingerprint)
        try:
            decision = Decision(decision).value
        except ValueError:
            raise ValueError(f"Unknown acceptance decision: {decision!r}") from None

        accepted: List[str] = []
        if decision != Decision.UNDECIDED.value:
            accepted = unique_emails(emails)
        stored_emails = [] if decision == Decision.REJECTED.value else accepted

        self.cache.store(fingerprint, decision, stored_emails)

        conn = None
        try:
            conn = await self._open()
            async with _transaction(conn):
                await self._delete_rows(conn, fingerprint)
                if decision != Decision.UNDECIDED.value:
                    await conn.execute(
                        f"INSERT INTO {DECISION_TABLE} VALUES (?, ?)",
                        (fingerprint, decision),
                    )
                    # rejection covers the whole key, no email rows
                    if stored_emails:
                        await conn.executemany(
                            f"INSERT INTO {EMAIL_TABLE} VALUES (?, ?)",
                            [(fingerprint, e) for e in stored_emails],
                        )
        finally:
            await close_quietly(conn)

        logger.debug(
            f"Updated acceptance for {fingerprint}: {decision} ({len(stored_emails)} emails)"
        )
        if self.auditor:
            await self.auditor.log_update(fingerprint, decision, len(stored_emails))
        await self.notifier.publish()

    # ------------------------------------------------------------------
    # Personal keys
    # ------------------------------------------------------------------

    async def accept_as_personal_key(self, fingerprint: str) -> None:
        await self.update_acceptance(fingerprint, None, Decision.PERSONAL)

    async def delete_personal_key_acceptance(self, fingerprint: str) -> None:
        await self.delete_acceptance(fingerprint)

    async def is_accepted_as_personal_key(self, fingerprint: str) -> bool:
        result = await self.get_fingerprint_acceptance(fingerprint)
        return result == Decision.PERSONAL.value
