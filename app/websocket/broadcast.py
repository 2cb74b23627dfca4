# =============================================================================
# app/websocket/broadcast.py - Subscription Adapters
# =============================================================================
# A subscription adapter is the pub/sub transport behind channel broadcasts.
#
#   test        - in-memory pub/sub that also records every broadcast
#   test_print  - same, but prints each broadcast to stdout first
#
# Usage:
#   adapter = build_subscription_adapter("test_print")
#   adapter.subscribe("chat:1", lambda payload: ...)
#   adapter.broadcast("chat:1", {"body": "hello"})
#   # [CABLE BROADCAST] channel=chat:1 data={'body': 'hello'}
# =============================================================================

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

from app.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class TestAdapter:
    """
    In-memory subscription adapter.

    Broadcasts are delivered synchronously to every subscriber of the
    channel and kept so tests can assert on them.
    """

    # Not a pytest test class
    __test__ = False

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)
        self._broadcasts: dict[str, list[Any]] = defaultdict(list)

    def subscribe(
        self,
        channel: str,
        callback: Subscriber,
        success_callback: Callable[[], None] | None = None,
    ) -> None:
        with self._lock:
            self._subscribers[channel].append(callback)
        if success_callback is not None:
            success_callback()

    def unsubscribe(self, channel: str, callback: Subscriber) -> None:
        with self._lock:
            subscribers = self._subscribers.get(channel)
            if subscribers and callback in subscribers:
                subscribers.remove(callback)
            if channel in self._subscribers and not self._subscribers[channel]:
                del self._subscribers[channel]

    def broadcast(self, channel: str, payload: Any) -> None:
        with self._lock:
            self._broadcasts[channel].append(payload)
            subscribers = list(self._subscribers.get(channel, ()))

        for callback in subscribers:
            callback(payload)

        logger.debug(f"Broadcast to {channel}: delivered to {len(subscribers)} subscribers")

    def broadcasts(self, channel: str) -> list[Any]:
        with self._lock:
            return list(self._broadcasts.get(channel, ()))

    def clear_messages(self, channel: str) -> None:
        with self._lock:
            self._broadcasts.pop(channel, None)

    def clear(self) -> None:
        with self._lock:
            self._broadcasts.clear()

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, ()))

    def shutdown(self) -> None:
        with self._lock:
            self._subscribers.clear()


class TestPrintAdapter(TestAdapter):
    """Test adapter that prints every broadcast to standard output."""

    def broadcast(self, channel: str, payload: Any) -> None:
        print(f"[CABLE BROADCAST] channel={channel} data={payload!r}", flush=True)
        super().broadcast(channel, payload)


SUBSCRIPTION_ADAPTERS: dict[str, type[TestAdapter]] = {
    "test": TestAdapter,
    "test_print": TestPrintAdapter,
}


def build_subscription_adapter(name: str) -> TestAdapter:
    """
    Build a subscription adapter by name.

    Raises:
        ConfigurationError: If no adapter has that name
    """
    adapter_class = SUBSCRIPTION_ADAPTERS.get(name)
    if adapter_class is None:
        raise ConfigurationError("cable adapter", name, sorted(SUBSCRIPTION_ADAPTERS))
    return adapter_class()
