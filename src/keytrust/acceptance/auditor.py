"""
AcceptanceAuditor - JSONL audit trail of acceptance changes.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Optional, Union

import aiofiles

logger = logging.getLogger(__name__)


class AuditLevel(IntEnum):
    """Audit event levels with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: Union[str, "AuditLevel"]) -> "AuditLevel":
        if isinstance(value, AuditLevel):
            return value
        return cls[value.strip().upper()]


class AcceptanceAuditor:
    """
    Append one JSON record per successful acceptance mutation.

    Writes are serialized with an asyncio.Lock; a write failure is logged
    and never reaches the caller.
    """

    def __init__(
        self,
        audit_path: Path,
        level: Union[str, AuditLevel] = AuditLevel.INFO,
    ):
        self.audit_path = Path(audit_path)
        self.level = AuditLevel.parse(level)
        self._lock = asyncio.Lock()

    async def log(
        self,
        event: str,
        level: AuditLevel = AuditLevel.INFO,
        **kwargs: Any,
    ) -> None:
        if level < self.level:
            return

        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": f"acceptance_{event}",
            "level": level.name.lower(),
            **kwargs,
        }

        async with self._lock:
            try:
                self.audit_path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(self.audit_path, "a") as f:
                    await f.write(json.dumps(record) + "\n")
            except Exception as e:
                logger.error(f"Failed to write audit log: {e}")

    async def log_update(
        self, fingerprint: str, decision: str, email_count: int
    ) -> None:
        await self.log(
            "update",
            fingerprint=fingerprint,
            decision=decision,
            email_count=email_count,
        )

    async def log_delete(self, fingerprint: str) -> None:
        await self.log("delete", fingerprint=fingerprint)

    async def log_add_email(
        self, fingerprint: str, decision: str, email: str
    ) -> None:
        await self.log(
            "add_email",
            fingerprint=fingerprint,
            decision=decision,
            email=email,
        )

    async def read_records(self, limit: Optional[int] = None) -> list:
        """Read back audit records, newest last."""
        if not self.audit_path.exists():
            return []
        async with aiofiles.open(self.audit_path, "r") as f:
            content = await f.read()
        records = [json.loads(line) for line in content.splitlines() if line.strip()]
        if limit is not None:
            records = records[-limit:]
        return records
