"""
Risk validation for arbitrage opportunities before they reach a handler.

Every check is fail-closed: if a venue cannot answer a liquidity or price
impact query, the opportunity is rejected rather than waved through.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from .interfaces import get_clock
from .router import Router
from .slippage import dynamic_slippage_bps
from .types import ArbitrageOpportunity, ValidationResult
from .utils import get_logger

logger = get_logger(__name__)

# Re-quoted first leg may decay at most 5% from the recorded output
STALE_TOLERANCE = Decimal("0.95")

# Each leg's liquidity must cover this multiple of the input amount
LIQUIDITY_MULTIPLIER = Decimal("3")

# Price impact ceiling per leg, percent
MAX_PRICE_IMPACT_PCT = Decimal("2.0")

# Liquidity score is not derived from depth yet; constant on success
LIQUIDITY_PLACEHOLDER_SCORE = 100

REASON_STALE = "stale"
REASON_LIQUIDITY_UNKNOWN = "unable to validate liquidity"
REASON_IMPACT_UNKNOWN = "unable to validate price impact"


class ValidationPipeline:
    """
    Staleness, liquidity depth, price impact and dynamic slippage checks.

    Args:
        router: Router used for re-quotes and per-venue lookups
        clock: Timestamp source for refreshed opportunities
    """

    def __init__(self, router: Router, clock=None):
        self.router = router
        self.clock = clock or get_clock()

    async def validate_opportunity(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        """
        Re-quote the first leg and reject if it returns less than 95% of the
        recorded output amount.
        """
        try:
            current = await self.router.find_best_route(
                opportunity.path[0], opportunity.path[1], opportunity.input_amount
            )
        except Exception as e:
            logger.debug(f"Re-quote failed for {opportunity.key}: {e}")
            return ValidationResult.reject(REASON_STALE, details={"error": str(e)})

        threshold = opportunity.output_amount * STALE_TOLERANCE
        if current.amount_out < threshold:
            return ValidationResult.reject(
                REASON_STALE,
                details={
                    "current_output": str(current.amount_out),
                    "required_output": str(threshold),
                },
            )

        return ValidationResult.ok(
            opportunity=opportunity.refreshed(self.clock.current_timestamp())
        )

    async def validate_liquidity(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        """Require liquidity >= 3x the input amount on every leg."""
        required = opportunity.input_amount * LIQUIDITY_MULTIPLIER

        for i, venue in enumerate(opportunity.venues):
            try:
                liquidity = await self.router.get_liquidity(
                    venue, opportunity.path[i], opportunity.path[i + 1]
                )
            except Exception as e:
                logger.warning(f"Liquidity check failed on {venue}: {e}")
                return ValidationResult.reject(
                    REASON_LIQUIDITY_UNKNOWN, details={"venue": venue, "error": str(e)}
                )

            if liquidity < required:
                return ValidationResult.reject(
                    f"insufficient liquidity on {venue}",
                    details={"liquidity": str(liquidity), "required": str(required)},
                )

        return ValidationResult.ok(score=LIQUIDITY_PLACEHOLDER_SCORE)

    async def validate_price_impact(
        self, opportunity: ArbitrageOpportunity
    ) -> ValidationResult:
        """
        Require price impact <= 2% on every leg.

        Leg 0 trades the input amount; later legs trade the output amount.
        """
        for i, venue in enumerate(opportunity.venues):
            amount = opportunity.input_amount if i == 0 else opportunity.output_amount
            try:
                impact = await self.router.get_price_impact(
                    venue, opportunity.path[i], opportunity.path[i + 1], amount
                )
            except Exception as e:
                logger.warning(f"Price impact check failed on {venue}: {e}")
                return ValidationResult.reject(
                    REASON_IMPACT_UNKNOWN, details={"venue": venue, "error": str(e)}
                )

            if impact > MAX_PRICE_IMPACT_PCT:
                return ValidationResult.reject(
                    f"excessive price impact on {venue}",
                    details={"price_impact_pct": str(impact)},
                )

        return ValidationResult.ok()

    async def current_gas_price_gwei(self) -> Optional[Decimal]:
        """Congestion from the router's shared handle; None when unavailable."""
        network = self.router.network
        if network is None:
            return None
        try:
            return await network.get_gas_price_gwei()
        except Exception as e:
            logger.debug(f"Congestion query failed, skipping: {e}")
            return None

    async def calculate_dynamic_slippage(
        self, opportunity: ArbitrageOpportunity
    ) -> int:
        gas_price = await self.current_gas_price_gwei()
        return dynamic_slippage_bps(
            opportunity.profit_bps,
            opportunity.hop_count,
            opportunity.liquidity_score,
            gas_price,
        )

    async def run(
        self, opportunity: ArbitrageOpportunity, strict: bool = False
    ) -> ValidationResult:
        """
        Full pipeline: staleness, liquidity, price impact, then slippage.

        Returns the first rejection, or a valid result whose opportunity
        carries the refreshed timestamp, liquidity score and slippage.

        Args:
            opportunity: Opportunity to validate
            strict: Raise instead of returning a rejection

        Raises:
            ValidationFailed: If strict and any check rejects
        """
        result = await self._run_checks(opportunity)
        if strict:
            result.raise_for_status()
        return result

    async def _run_checks(self, opportunity: ArbitrageOpportunity) -> ValidationResult:
        fresh = await self.validate_opportunity(opportunity)
        if not fresh.valid:
            return fresh
        current = fresh.opportunity

        liquidity = await self.validate_liquidity(current)
        if not liquidity.valid:
            return liquidity
        current = replace(current, liquidity_score=liquidity.score)

        impact = await self.validate_price_impact(current)
        if not impact.valid:
            return impact

        slippage = await self.calculate_dynamic_slippage(current)
        current = replace(current, slippage_bps=slippage)

        return ValidationResult.ok(score=liquidity.score, opportunity=current)
