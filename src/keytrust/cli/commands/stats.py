#!/usr/bin/env python
"""
stats command - Count stored decisions.
"""

from __future__ import annotations

from keytrust.acceptance import AcceptanceStore, Decision, StorageError, StorageUnavailable
from keytrust.cli.output import ConsoleOutput
from keytrust.config import KeyTrustConfig


async def run(config: KeyTrustConfig, console: ConsoleOutput) -> int:
    """Run the stats command."""
    store = AcceptanceStore(config=config)
    try:
        counts = await store.count_by_decision()
    except (StorageError, StorageUnavailable) as e:
        console.print_error(f"{config.db_path}: {e}")
        return 1

    ordered = {d.value: counts.get(d.value, 0) for d in Decision if d is not Decision.UNDECIDED}
    console.print_counts(f"Acceptance decisions in {config.db_path}", ordered)
    console.print(f"Total: {sum(ordered.values())}")
    return 0
