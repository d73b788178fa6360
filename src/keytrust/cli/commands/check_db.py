#!/usr/bin/env python
"""
check-db command - Make sure the acceptance tables exist.
"""

from __future__ import annotations

from keytrust.acceptance import AcceptanceStore, StorageError, StorageUnavailable
from keytrust.cli.output import ConsoleOutput
from keytrust.config import KeyTrustConfig


async def run(config: KeyTrustConfig, console: ConsoleOutput) -> int:
    """Run the check-db command."""
    store = AcceptanceStore(config=config)
    try:
        await store.initialize()
    except (StorageError, StorageUnavailable) as e:
        console.print_error(f"{config.db_path}: {e}")
        return 1

    console.print_success(f"Acceptance database ready at {config.db_path}")
    return 0
