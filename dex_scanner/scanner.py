"""
Opportunity scanner: periodic scan loop over configured token pairs.

Each iteration asks the router for round trips from every base token,
optionally passes them through a filter collaborator, logs price
discrepancies for observability, then validates qualifying opportunities
and hands them to the caller.

Cancellation is cooperative: stop_scanning() only clears a flag that is
checked at the top of the loop, so an iteration in flight (and its sleep)
always completes. There is no per-venue query timeout.
"""

import inspect
from typing import Any, Awaitable, Callable, List, Optional, Union

from .config import ScannerConfig
from .interfaces import (
    OpportunityFilterProtocol,
    PriceOracleProtocol,
    ScanCounter,
    get_clock,
)
from .metrics import ScannerMetrics
from .router import Router
from .types import ArbitrageOpportunity, ValidationResult
from .utils import get_logger
from .validation import ValidationPipeline

logger = get_logger(__name__)

OpportunityHandler = Callable[
    [ArbitrageOpportunity], Union[None, Awaitable[None]]
]


class Scanner:
    """
    Drives the scan loop.

    Args:
        router: Routing aggregator with all venues registered
        config: Scanner configuration
        price_oracle: Discrepancy oracle, logged only
        opportunity_filter: Optional filter/dedup collaborator
        scan_counter: Receives increment() after every completed scan
        metrics: Optional Prometheus metrics
        clock: Time source for sleeps and timestamps
    """

    def __init__(
        self,
        router: Router,
        config: ScannerConfig,
        price_oracle: Optional[PriceOracleProtocol] = None,
        opportunity_filter: Optional[OpportunityFilterProtocol] = None,
        scan_counter: Optional[ScanCounter] = None,
        metrics: Optional[ScannerMetrics] = None,
        clock=None,
    ):
        self.router = router
        self.config = config
        self.price_oracle = price_oracle
        self.opportunity_filter = opportunity_filter
        self.scan_counter = scan_counter
        self.metrics = metrics
        self.clock = clock or get_clock()
        self.validator = ValidationPipeline(router, clock=self.clock)
        self.is_scanning = False

    async def scan(self) -> List[ArbitrageOpportunity]:
        """
        Run one scan over every base token.

        Returns:
            Opportunities from all base tokens, filtered if a filter
            collaborator is available
        """
        opportunities: List[ArbitrageOpportunity] = []

        for base_token in self.config.base_tokens:
            try:
                routes = await self.router.find_arbitrage_routes(
                    base_token,
                    self.config.intermediate_tokens,
                    self.config.default_amount,
                )
                opportunities.extend(routes)
            except Exception as e:
                logger.debug(f"Failed to scan {base_token}: {e}")

        if self.opportunity_filter is not None and self.opportunity_filter.is_available():
            opportunities = self._apply_filter(opportunities)

        await self._log_discrepancies()

        return opportunities

    def _apply_filter(
        self, opportunities: List[ArbitrageOpportunity]
    ) -> List[ArbitrageOpportunity]:
        plain = [opp.to_dict() for opp in opportunities]
        try:
            filtered = self.opportunity_filter.filter_opportunities(plain)
            kept = [ArbitrageOpportunity.from_dict(item) for item in filtered]
        except Exception as e:
            logger.warning(f"Opportunity filter failed, using unfiltered results: {e}")
            return opportunities

        logger.debug(f"Filter kept {len(kept)} of {len(plain)} opportunities")
        return kept

    async def _log_discrepancies(self) -> None:
        if self.price_oracle is None:
            return

        for token_a in self.config.base_tokens:
            for token_b in self.config.intermediate_tokens:
                try:
                    discrepancy = await self.price_oracle.detect_discrepancies(
                        token_a, token_b
                    )
                    if discrepancy.has_discrepancy:
                        logger.info(
                            f"Price discrepancy detected: {token_a}/{token_b} "
                            f"spread {discrepancy.spread_bps} bps"
                        )
                except Exception as e:
                    logger.debug(f"Failed to check discrepancy: {e}")

    async def start_scanning(self, on_opportunity: OpportunityHandler) -> None:
        """
        Scan until stop_scanning() is called.

        Errors inside an iteration are logged and never end the loop; the
        configured interval is slept after every iteration, failed or not.

        Args:
            on_opportunity: Called once per qualifying opportunity; may be a
                plain function or a coroutine function
        """
        if self.is_scanning:
            logger.warning("Scanner is already running")
            return

        self.is_scanning = True
        self.router.scan_active = True
        logger.info("Starting opportunity scanner")

        try:
            while self.is_scanning:
                try:
                    opportunities = await self.scan()

                    if self.scan_counter is not None:
                        self.scan_counter.increment()
                    if self.metrics is not None:
                        self.metrics.set_last_scan(len(opportunities))

                    for opp in opportunities:
                        if opp.profit_bps >= self.config.min_profit_bps:
                            logger.info(
                                f"Opportunity found: {' -> '.join(opp.path)} "
                                f"via {', '.join(opp.venues)} "
                                f"profit {opp.profit_bps} bps"
                            )
                            if self.metrics is not None:
                                self.metrics.record_opportunity(opp.path[0])
                            await self._deliver(opp, on_opportunity)
                except Exception as e:
                    logger.error(f"Scan error: {e}")

                await self.clock.sleep(self.config.scan_interval_sec)
        finally:
            self.router.scan_active = False
            logger.info("Opportunity scanner stopped")

    async def _deliver(
        self, opportunity: ArbitrageOpportunity, on_opportunity: OpportunityHandler
    ) -> None:
        """Validate (when enabled) and invoke the handler, isolating its errors."""
        if self.config.validation_enabled:
            try:
                result = await self.validator.run(opportunity)
            except Exception as e:
                logger.error(f"Validation error for {opportunity.key}: {e}")
                return
            if not result.valid:
                logger.info(f"Opportunity {opportunity.key} rejected: {result.reason}")
                if self.metrics is not None:
                    self.metrics.record_rejection(result.reason or "invalid")
                return
            opportunity = result.opportunity

        try:
            outcome: Any = on_opportunity(opportunity)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Opportunity handler error: {e}", exc_info=True)
            if self.metrics is not None:
                self.metrics.record_handler_error()

    def stop_scanning(self) -> None:
        """Request the loop to stop at the next iteration boundary."""
        self.is_scanning = False
        logger.info("Stopping opportunity scanner")

    async def validate_opportunity(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        return await self.validator.validate_opportunity(opportunity)

    async def validate_liquidity(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        return await self.validator.validate_liquidity(opportunity)

    async def validate_price_impact(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        return await self.validator.validate_price_impact(opportunity)

    async def calculate_dynamic_slippage(self, opportunity: ArbitrageOpportunity) -> int:
        return await self.validator.calculate_dynamic_slippage(opportunity)
