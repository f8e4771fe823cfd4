"""
Pytest configuration for the air quality core tests.

Registers custom markers and provides shared fixtures.
"""
import threading

import pytest

from apps.alerts.dispatcher import AlertDispatcher
from apps.alerts.registry import SubscriptionRegistry
from apps.alerts.storage import InMemorySubscriptionStore
from apps.alerts.types import Receipt
from apps.core.exceptions import DispatchFailure


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class RecordingNotifier:
    """Notifier double that records every delivery and fails for chosen contacts."""

    def __init__(self, fail_for=(), block=None):
        self.sent = []
        self.fail_for = set(fail_for)
        self.block = block
        self._lock = threading.Lock()

    def send(self, channel, contact, message):
        if self.block is not None:
            self.block.wait(timeout=5)
        if contact in self.fail_for:
            raise DispatchFailure(channel, contact, 'simulated outage')
        with self._lock:
            self.sent.append((channel, contact, message))
            count = len(self.sent)
        return Receipt(channel=channel, contact=contact, message_id=f"test-{count}")

    def contacts(self):
        with self._lock:
            return [contact for _, contact, _ in self.sent]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def registry():
    return SubscriptionRegistry(InMemorySubscriptionStore())


@pytest.fixture
def dispatcher(notifier):
    dispatcher = AlertDispatcher(notifier, queue_size=50, workers=2)
    dispatcher.start()
    yield dispatcher
    dispatcher.shutdown(wait=False)
