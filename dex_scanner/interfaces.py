"""
Dependency injection interfaces for time and collaborator protocols.

The scanner sleeps and stamps opportunities through a Clock so that tests
can drive the scan loop without waiting on wall-clock time.
"""

import asyncio
import time
from decimal import Decimal
from typing import Any, Dict, List, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...

    async def sleep(self, duration: float) -> None:
        """Sleep for specified duration in seconds."""
        ...


class SystemClock:
    """Production clock using system time and asyncio sleep."""

    def current_timestamp(self) -> float:
        return time.time()

    async def sleep(self, duration: float) -> None:
        await asyncio.sleep(duration)


class DeterministicClock:
    """Deterministic clock for testing; sleep advances time instantly."""

    def __init__(self, start_time: float = 1640995200.0):  # 2022-01-01
        self._current_time = start_time
        self.sleeps: List[float] = []

    def current_timestamp(self) -> float:
        return self._current_time

    async def sleep(self, duration: float) -> None:
        """Advance time by duration instead of actually sleeping."""
        self.sleeps.append(duration)
        self._current_time += duration
        # Still yield so other tasks get a turn
        await asyncio.sleep(0)

    def advance_time(self, seconds: float) -> None:
        self._current_time += seconds


@runtime_checkable
class NetworkHandle(Protocol):
    """Shared network-query handle exposing a congestion lookup."""

    async def get_gas_price_gwei(self) -> Decimal:
        """Current gas price in gwei."""
        ...


@runtime_checkable
class PriceOracleProtocol(Protocol):
    """Price-discrepancy oracle collaborator."""

    async def detect_discrepancies(self, token_a: str, token_b: str) -> Any:
        """Return an object with has_discrepancy and spread_bps."""
        ...


@runtime_checkable
class OpportunityFilterProtocol(Protocol):
    """Accelerated filter/dedup collaborator working on plain-data dicts."""

    def is_available(self) -> bool:
        ...

    def filter_opportunities(
        self, opportunities: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class ScanCounter(Protocol):
    """Receives one increment() per completed scan."""

    def increment(self) -> None:
        ...


_default_clock = SystemClock()


def get_clock() -> Clock:
    """Get the default clock instance."""
    return _default_clock
