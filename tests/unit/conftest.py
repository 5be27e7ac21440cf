"""Shared fixtures: scriptable venues and a deterministic clock."""

import asyncio
from decimal import Decimal

import pytest

from dex_scanner.config import ScannerConfig
from dex_scanner.exceptions import VenueError
from dex_scanner.interfaces import DeterministicClock
from dex_scanner.router import Router
from dex_scanner.types import Quote
from dex_scanner.venues.base import Capability, VenueAdapter

ALL_CAPABILITIES = (Capability.QUOTE, Capability.LIQUIDITY, Capability.PRICE_IMPACT)


class FakeVenue(VenueAdapter):
    """
    Venue quoting amount_in * rate for configured pairs.

    liquidity / impact map (token_in, token_out) to a value, or to an
    exception instance to raise.
    """

    def __init__(
        self,
        name,
        rates=None,
        liquidity=None,
        impact=None,
        fail=False,
        delay=0.0,
        capabilities=ALL_CAPABILITIES,
        network=None,
    ):
        super().__init__(name, capabilities=capabilities, network=network)
        self.rates = {k: Decimal(v) for k, v in (rates or {}).items()}
        self.liquidity = liquidity or {}
        self.impact = impact or {}
        self.fail = fail
        self.delay = delay
        self.quote_calls = []

    async def get_quote(self, token_in, token_out, amount_in):
        self.quote_calls.append((token_in, token_out, amount_in))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise VenueError(f"{self.name} unavailable", venue=self.name)
        try:
            rate = self.rates[(token_in, token_out)]
        except KeyError:
            raise VenueError(f"{self.name}: no pair", venue=self.name) from None
        return Quote(amount_out=amount_in * rate, path=[token_in, token_out])

    async def get_liquidity(self, token_in, token_out):
        value = self.liquidity[(token_in, token_out)]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_price_impact(self, token_in, token_out, amount):
        value = self.impact[(token_in, token_out)]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def router(clock):
    return Router(clock=clock)


@pytest.fixture
def arb_venues():
    """
    Two venues with a 5% round trip over a stablecoin pair.

    10000 USDC -> 10000 USDT (cheap) -> 10500 USDC (rich) = 500 bps.
    """
    cheap = FakeVenue(
        "cheap",
        rates={("USDC", "USDT"): "1", ("USDT", "USDC"): "0.98"},
        liquidity={("USDC", "USDT"): Decimal("100000"), ("USDT", "USDC"): Decimal("100000")},
        impact={("USDC", "USDT"): Decimal("0.5"), ("USDT", "USDC"): Decimal("0.5")},
    )
    rich = FakeVenue(
        "rich",
        rates={("USDC", "USDT"): "0.95", ("USDT", "USDC"): "1.05"},
        liquidity={("USDC", "USDT"): Decimal("100000"), ("USDT", "USDC"): Decimal("100000")},
        impact={("USDC", "USDT"): Decimal("0.5"), ("USDT", "USDC"): Decimal("0.5")},
    )
    return cheap, rich


@pytest.fixture
def arb_router(router, arb_venues):
    for venue in arb_venues:
        router.register_venue(venue.name, venue)
    return router


@pytest.fixture
def scanner_config():
    return ScannerConfig(
        {
            "base_tokens": ["USDC"],
            "intermediate_tokens": ["USDT"],
            "default_amount": "10000",
            "min_profit_bps": 50,
            "scan_interval_ms": 1000,
        }
    )


@pytest.fixture
def make_venue():
    """FakeVenue constructor."""
    return FakeVenue
