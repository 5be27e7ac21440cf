"""Tests for dependency injection interfaces."""

import time

import pytest

from dex_scanner.interfaces import (
    Clock,
    DeterministicClock,
    NetworkHandle,
    OpportunityFilterProtocol,
    ScanCounter,
    SystemClock,
    get_clock,
)
from dex_scanner.dedup import OpportunityFilter
from dex_scanner.metrics import ScannerMetrics
from prometheus_client import CollectorRegistry


def test_system_clock():
    clock = SystemClock()
    assert abs(clock.current_timestamp() - time.time()) < 1.0


@pytest.mark.asyncio
async def test_system_clock_sleep():
    clock = SystemClock()
    start = clock.current_timestamp()
    await clock.sleep(0.01)
    assert clock.current_timestamp() >= start + 0.005


@pytest.mark.asyncio
async def test_deterministic_clock():
    clock = DeterministicClock(start_time=1000.0)
    assert clock.current_timestamp() == 1000.0

    await clock.sleep(5.0)
    assert clock.current_timestamp() == 1005.0
    assert clock.sleeps == [5.0]

    clock.advance_time(10.0)
    assert clock.current_timestamp() == 1015.0
    assert clock.sleeps == [5.0]


def test_default_clock():
    assert isinstance(get_clock(), SystemClock)
    assert get_clock() is get_clock()


def test_protocol_conformance():
    assert isinstance(SystemClock(), Clock)
    assert isinstance(DeterministicClock(), Clock)
    assert isinstance(OpportunityFilter(), OpportunityFilterProtocol)
    assert isinstance(ScannerMetrics(CollectorRegistry()), ScanCounter)
    assert not isinstance(object(), NetworkHandle)
