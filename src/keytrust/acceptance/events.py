"""
AcceptanceNotifier - change channel for acceptance mutations.

Observers (a key manager view, a compose window) subscribe a callback and
refresh whatever trust state they show when it fires. The signal carries no
payload.
"""

from __future__ import annotations

import inspect
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class AcceptanceNotifier:
    """Explicit subscribe/publish channel, one per store."""

    def __init__(self):
        self._listeners: List[Callable[[], object]] = []

    def subscribe(self, callback: Callable[[], object]) -> None:
        """Add a change listener. Coroutine functions are awaited."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], object]) -> None:
        """Remove a change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self) -> None:
        """Notify every listener; a failing listener does not stop the rest."""
        for listener in list(self._listeners):
            try:
                result = listener()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Acceptance change listener {listener!r} failed: {e}")
