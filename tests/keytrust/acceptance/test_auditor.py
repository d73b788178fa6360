"""Tests for AcceptanceAuditor."""

import json

import pytest

from keytrust.acceptance.auditor import AcceptanceAuditor, AuditLevel


@pytest.fixture
def audit_path(tmp_path):
    return tmp_path / "audit" / "acceptance_audit.jsonl"


@pytest.mark.asyncio
async def test_log_update_writes_jsonl(audit_path):
    auditor = AcceptanceAuditor(audit_path)

    await auditor.log_update("ab" * 20, "verified", 2)
    await auditor.log_add_email("ab" * 20, "verified", "a@example.com")

    lines = audit_path.read_text().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event"] == "acceptance_update"
    assert first["level"] == "info"
    assert first["decision"] == "verified"
    assert first["email_count"] == 2
    assert "ts" in first


@pytest.mark.asyncio
async def test_level_filter(audit_path):
    auditor = AcceptanceAuditor(audit_path, level="warn")

    await auditor.log_delete("ab" * 20)
    await auditor.log("storage_failure", AuditLevel.ERROR, detail="disk full")

    records = await auditor.read_records()
    assert [r["event"] for r in records] == ["acceptance_storage_failure"]


@pytest.mark.asyncio
async def test_read_records_limit(audit_path):
    auditor = AcceptanceAuditor(audit_path)
    for i in range(5):
        await auditor.log("update", fingerprint=str(i))

    records = await auditor.read_records(limit=2)

    assert [r["fingerprint"] for r in records] == ["3", "4"]


@pytest.mark.asyncio
async def test_read_records_missing_file(audit_path):
    assert await AcceptanceAuditor(audit_path).read_records() == []


@pytest.mark.asyncio
async def test_write_failure_is_swallowed(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    auditor = AcceptanceAuditor(blocker / "audit.jsonl")

    await auditor.log_delete("ab" * 20)


def test_parse_level():
    assert AuditLevel.parse("debug") is AuditLevel.DEBUG
    assert AuditLevel.parse(AuditLevel.ERROR) is AuditLevel.ERROR
    with pytest.raises(KeyError):
        AuditLevel.parse("loud")
