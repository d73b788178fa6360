"""Tests for AcceptanceNotifier."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from keytrust.acceptance.events import AcceptanceNotifier


@pytest.mark.asyncio
async def test_publish_calls_sync_and_async_listeners():
    notifier = AcceptanceNotifier()
    sync_listener = MagicMock()
    async_listener = AsyncMock()
    notifier.subscribe(sync_listener)
    notifier.subscribe(async_listener)

    await notifier.publish()

    sync_listener.assert_called_once_with()
    async_listener.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others():
    notifier = AcceptanceNotifier()
    broken = MagicMock(side_effect=RuntimeError("boom"))
    healthy = MagicMock()
    notifier.subscribe(broken)
    notifier.subscribe(healthy)

    await notifier.publish()

    healthy.assert_called_once()


@pytest.mark.asyncio
async def test_unsubscribe():
    notifier = AcceptanceNotifier()
    listener = MagicMock()
    notifier.subscribe(listener)
    notifier.unsubscribe(listener)
    notifier.unsubscribe(listener)

    await notifier.publish()

    listener.assert_not_called()
    assert notifier.listener_count == 0


def test_subscribe_twice_registers_once():
    notifier = AcceptanceNotifier()
    listener = MagicMock()

    notifier.subscribe(listener)
    notifier.subscribe(listener)

    assert notifier.listener_count == 1
