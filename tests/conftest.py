"""
Shared fixtures for flow builder tests.
"""

import pytest

from flowbuilder.edit.actions import FlowActions
from flowbuilder.notifications import NotificationCenter
from flowbuilder.store import FlowStore, NodeIdCounter


class FakeScheduler:
    """Manual clock standing in for the event loop's call_later."""

    class Handle:
        def __init__(self, due, callback):
            self.due = due
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def __call__(self, delay, callback):
        handle = self.Handle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds):
        self.now += seconds
        for handle in list(self.handles):
            if not handle.cancelled and handle.due <= self.now:
                self.handles.remove(handle)
                handle.callback()

    def pending(self):
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def notifications(scheduler):
    return NotificationCenter(scheduler=scheduler, timeout_ms=3000)


@pytest.fixture
def store():
    return FlowStore(id_counter=NodeIdCounter(start=1))


@pytest.fixture
def exported():
    return []


@pytest.fixture
def actions(store, notifications, exported):
    return FlowActions(store, notifications, export_sink=exported.append)
