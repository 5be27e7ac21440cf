"""
Arbitrage bot: wires router, scanner, filter, oracle and metrics together
and keeps detection statistics.

Execution is not part of this package. Validated opportunities are
recorded and forwarded to an optional sink supplied by the caller.
"""

import inspect
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

from .config import ScannerConfig
from .dedup import OpportunityFilter
from .exceptions import ValidationFailed
from .interfaces import NetworkHandle, get_clock
from .metrics import ScannerMetrics
from .oracle import VenueSpreadOracle
from .router import Router
from .scanner import Scanner
from .types import ArbitrageOpportunity
from .utils import get_logger, timestamp_to_iso
from .venues.v2 import ReserveVenue

logger = get_logger(__name__)


def build_router(
    config: ScannerConfig, network: Optional[NetworkHandle] = None, clock=None
) -> Router:
    """
    Create a router with one ReserveVenue per configured venue.

    Args:
        config: Scanner config with a venues section
        network: Shared network handle given to every venue
        clock: Time source for opportunity timestamps
    """
    router = Router(clock=clock)
    for venue_cfg in config.venues:
        venue = ReserveVenue(
            venue_cfg["name"], fee_bps=venue_cfg["fee_bps"], network=network
        )
        for pool in venue_cfg["pools"]:
            venue.set_reserves(
                pool["token_a"], pool["token_b"], pool["reserve_a"], pool["reserve_b"]
            )
        router.register_venue(venue_cfg["name"], venue)
    return router


class ArbitrageBot:
    """
    Owns a Scanner and counts what flows through it.

    Args:
        config: Scanner configuration
        router: Router with venues registered
        metrics: Optional Prometheus metrics
        on_opportunity: Optional sink for validated opportunities
        clock: Time source shared with scanner, filter and oracle
        history_size: How many accepted opportunities to keep
    """

    def __init__(
        self,
        config: ScannerConfig,
        router: Router,
        metrics: Optional[ScannerMetrics] = None,
        on_opportunity: Optional[Callable[[ArbitrageOpportunity], Any]] = None,
        clock=None,
        history_size: int = 100,
    ):
        self.config = config
        self.router = router
        self.clock = clock or get_clock()
        self.metrics = metrics
        self.on_opportunity = on_opportunity

        self.opportunity_filter: Optional[OpportunityFilter] = None
        if config.filter_enabled:
            self.opportunity_filter = OpportunityFilter(
                min_profit_bps=config.min_profit_bps,
                max_size=config.filter_max_size,
                clock=self.clock,
            )

        self.price_oracle = VenueSpreadOracle(
            router, probe_amount=config.oracle_probe_amount, clock=self.clock
        )

        self.scanner = Scanner(
            router,
            config,
            price_oracle=self.price_oracle,
            opportunity_filter=self.opportunity_filter,
            scan_counter=self,
            metrics=metrics,
            clock=self.clock,
        )

        self.is_running = False
        self.opportunities: Deque[ArbitrageOpportunity] = deque(maxlen=history_size)
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {"scanned": 0, "validated": 0, "rejected": 0, "sink_errors": 0}

    async def start(self) -> None:
        """Run the scan loop until stop() is called."""
        if self.is_running:
            logger.warning("Bot is already running")
            return

        self.is_running = True
        logger.info(f"Starting ArbitrageBot with venues: {self.router.list_venues()}")
        try:
            await self.scanner.start_scanning(self.handle_opportunity)
        finally:
            self.is_running = False

    def stop(self) -> None:
        self.scanner.stop_scanning()
        logger.info("ArbitrageBot stopping")

    async def run_once(self, validate: bool = False):
        """
        Single scan without handler delivery.

        With validate, each opportunity goes through the full validation
        pipeline and only the accepted ones (with slippage attached) are
        returned.
        """
        opportunities = await self.scanner.scan()
        self.increment()
        if not validate:
            return opportunities

        accepted = []
        for opportunity in opportunities:
            try:
                result = await self.scanner.validator.run(opportunity, strict=True)
            except ValidationFailed as e:
                self.stats["rejected"] += 1
                logger.info(f"Rejected {opportunity.key}: {e.reason}")
                continue
            accepted.append(result.opportunity)
        return accepted

    def increment(self) -> None:
        """Scan-count collaborator hook, called once per completed scan."""
        self.stats["scanned"] += 1
        if self.metrics is not None:
            self.metrics.increment()

    async def handle_opportunity(self, opportunity: ArbitrageOpportunity) -> None:
        """Record a validated opportunity and forward it to the sink."""
        self.stats["validated"] += 1
        self.opportunities.append(opportunity)

        logger.info(
            f"Validated opportunity {opportunity.key}: "
            f"profit {opportunity.profit} ({opportunity.profit_bps} bps), "
            f"slippage {opportunity.slippage_bps} bps "
            f"at {timestamp_to_iso(opportunity.timestamp)}"
        )

        if self.on_opportunity is None:
            return
        try:
            outcome = self.on_opportunity(opportunity)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.stats["sink_errors"] += 1
            logger.error(f"Opportunity sink failed: {e}")

    def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = dict(self.stats)
        stats["opportunities"] = len(self.opportunities)
        if self.opportunity_filter is not None:
            stats["filter"] = self.opportunity_filter.get_stats()
        return stats

    def reset_stats(self) -> None:
        self.stats = self._empty_stats()
        self.opportunities.clear()
