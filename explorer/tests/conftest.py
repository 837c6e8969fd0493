"""Shared pytest fixtures for the tree store tests."""

from datetime import datetime, timedelta, timezone

import pytest

from explorer.seed import initial_tree
from explorer.store import TreeStore


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    """Store over a fresh copy of the demo tree."""
    return TreeStore(root=initial_tree(), clock=clock)
