"""Pytest configuration and shared fixtures for RPC cache tests."""

import pytest

from tests.fakes import FakeBlockTracker, FakeClock, FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    """Provide a transport with no queued results."""
    return FakeTransport()


@pytest.fixture
def block_tracker() -> FakeBlockTracker:
    """Provide a block tracker reporting block 0x100."""
    return FakeBlockTracker("0x100")


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()
