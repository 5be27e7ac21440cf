"""
Price discrepancy oracle built on the router's venues.

Prices the same pair on every venue with a fixed probe amount and reports
the spread between the best and worst venue. Results are cached per pair
for a short TTL to keep the scan loop from re-quoting every cycle.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .interfaces import get_clock
from .router import Router
from .utils import get_logger, to_decimal
from .venues.base import Capability

logger = get_logger(__name__)

# 0.5% spread between venues counts as a discrepancy
DEFAULT_THRESHOLD_BPS = 50


@dataclass
class Discrepancy:
    """Spread analysis for one token pair."""

    has_discrepancy: bool
    spread_bps: int = 0
    max_price: Optional[Decimal] = None
    min_price: Optional[Decimal] = None
    sources: List[str] = field(default_factory=list)


class VenueSpreadOracle:
    """
    Detects cross-venue price spreads.

    Args:
        router: Router whose venues are priced
        probe_amount: Amount of token_a quoted on each venue
        threshold_bps: Spread above which has_discrepancy is True
        cache_ttl_sec: How long a pair's analysis is reused
        clock: Time source for the cache
    """

    def __init__(
        self,
        router: Router,
        probe_amount=Decimal("1"),
        threshold_bps: int = DEFAULT_THRESHOLD_BPS,
        cache_ttl_sec: float = 10.0,
        clock=None,
    ):
        self.router = router
        self.probe_amount = to_decimal(probe_amount)
        self.threshold_bps = threshold_bps
        self.cache_ttl = cache_ttl_sec
        self.clock = clock or get_clock()
        self._cache: Dict[str, Tuple[Discrepancy, float]] = {}

    async def fetch_prices(self, token_a: str, token_b: str) -> Dict[str, Decimal]:
        """Per-venue price of token_a in token_b; failing venues are left out."""
        prices: Dict[str, Decimal] = {}
        for name in self.router.list_venues():
            adapter = self.router.get_venue(name)
            if not adapter.supports(Capability.QUOTE):
                continue
            try:
                quote = await adapter.get_quote(token_a, token_b, self.probe_amount)
            except Exception as e:
                logger.debug(f"Oracle price from {name} failed: {e}")
                continue
            prices[name] = to_decimal(quote.amount_out) / self.probe_amount
        return prices

    async def detect_discrepancies(self, token_a: str, token_b: str) -> Discrepancy:
        pair_key = f"{token_a}-{token_b}"
        now = self.clock.current_timestamp()

        cached = self._cache.get(pair_key)
        if cached and now - cached[1] < self.cache_ttl:
            return cached[0]

        prices = await self.fetch_prices(token_a, token_b)

        if len(prices) < 2:
            result = Discrepancy(has_discrepancy=False, sources=list(prices))
        else:
            max_price = max(prices.values())
            min_price = min(prices.values())
            spread_bps = (
                int((max_price - min_price) * Decimal("10000") // max_price)
                if max_price > 0
                else 0
            )
            result = Discrepancy(
                has_discrepancy=spread_bps > self.threshold_bps,
                spread_bps=spread_bps,
                max_price=max_price,
                min_price=min_price,
                sources=list(prices),
            )

        self._cache[pair_key] = (result, now)
        return result

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Price cache cleared")
