"""Unit-test fixtures: fake repositories, virtual clock, recorded session."""

from unittest.mock import AsyncMock

import pytest
from fakes import (
    FakeBidRepo,
    FakeCollectibleRepo,
    FakeListingRepo,
    FakeOrderRepo,
    VirtualClock,
)

from src.sm_common.locks import KeyedLocks


@pytest.fixture
def db() -> AsyncMock:
    """Session stand-in: commit/rollback/execute are awaitable and recorded."""
    return AsyncMock()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def locks() -> KeyedLocks:
    return KeyedLocks()


@pytest.fixture
def collectibles() -> FakeCollectibleRepo:
    return FakeCollectibleRepo()


@pytest.fixture
def listings() -> FakeListingRepo:
    return FakeListingRepo()


@pytest.fixture
def bids() -> FakeBidRepo:
    return FakeBidRepo()


@pytest.fixture
def orders() -> FakeOrderRepo:
    return FakeOrderRepo()
