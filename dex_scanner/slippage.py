"""
Slippage and price impact calculations.

Two pieces live here:

1. The exact constant-product price impact used by reserve-backed venues.
2. The risk-adjusted dynamic slippage tolerance (integer basis points) the
   validation pipeline attaches to every surviving opportunity.
"""

from decimal import Decimal
from typing import Optional

from .utils import floor_decimal, get_logger

logger = get_logger(__name__)

# Dynamic slippage tiers (bps)
BASE_SLIPPAGE_BPS = 50
LOW_PROFIT_SLIPPAGE_BPS = 30
MID_PROFIT_SLIPPAGE_BPS = 100
HIGH_PROFIT_SLIPPAGE_BPS = 150
MAX_SLIPPAGE_BPS = 300

LOW_PROFIT_THRESHOLD_BPS = 100
MID_PROFIT_THRESHOLD_BPS = 500
HIGH_PROFIT_THRESHOLD_BPS = 1000

# Risk multipliers
MULTI_HOP_MULTIPLIER = Decimal("1.3")
LOW_LIQUIDITY_MULTIPLIER = Decimal("1.4")
CONGESTION_MULTIPLIER = Decimal("1.2")

MULTI_HOP_THRESHOLD = 2
LOW_LIQUIDITY_SCORE = 50
CONGESTION_GAS_GWEI = Decimal("200")


def calculate_price_impact(
    amount_in: Decimal,
    reserve_in: Decimal,
    reserve_out: Decimal,
    fee: Decimal = Decimal("0.003"),
) -> Decimal:
    """
    Calculate price impact for a Uniswap V2 style swap using exact constant product formula.

    Exact formula: price_impact = 1 - (amount_out_actual / amount_out_no_impact)

    Args:
        amount_in: Amount of input token (raw units)
        reserve_in: Input token reserve (raw units)
        reserve_out: Output token reserve (raw units)
        fee: DEX fee as decimal (0.003 = 0.3%)

    Returns:
        Price impact as decimal fraction (e.g., 0.0025 = 0.25%)
    """
    if reserve_in == 0 or reserve_out == 0:
        return Decimal("1.0")  # empty pool

    amount_in_after_fee = amount_in * (Decimal("1") - fee)

    amount_out = (reserve_out * amount_in_after_fee) / (
        reserve_in + amount_in_after_fee
    )

    # Output at spot price, no curve movement
    theoretical_output = (amount_in_after_fee * reserve_out) / reserve_in

    if theoretical_output == 0:
        return Decimal("1.0")

    price_impact = Decimal("1") - (amount_out / theoretical_output)

    return max(Decimal("0"), min(price_impact, Decimal("1.0")))


def _apply_multiplier(slippage_bps: int, multiplier: Decimal) -> int:
    return int(floor_decimal(Decimal(slippage_bps) * multiplier))


def dynamic_slippage_bps(
    profit_bps: int,
    hop_count: int,
    liquidity_score: Optional[int] = None,
    gas_price_gwei: Optional[Decimal] = None,
) -> int:
    """
    Risk-adjusted slippage tolerance in whole basis points.

    Steps, each floored to an integer before the next:
        base 50; profit tier override (<100 -> 30, >500 -> 100, >1000 -> 150);
        >2 hops x1.3; liquidity score below 50 x1.4; gas above 200 gwei x1.2;
        capped at 300.

    The >1000 tier is checked after >500 and therefore never selected.

    Args:
        profit_bps: Opportunity profit in bps
        hop_count: Number of legs (len(path) - 1)
        liquidity_score: Score from liquidity validation, None if not run
        gas_price_gwei: Current gas price, None when congestion is unknown

    Returns:
        Slippage tolerance in bps

    Example:
        >>> dynamic_slippage_bps(600, 3, 40, Decimal("250"))
        218
    """
    slippage = BASE_SLIPPAGE_BPS

    if profit_bps < LOW_PROFIT_THRESHOLD_BPS:
        slippage = LOW_PROFIT_SLIPPAGE_BPS
    elif profit_bps > MID_PROFIT_THRESHOLD_BPS:
        slippage = MID_PROFIT_SLIPPAGE_BPS
    elif profit_bps > HIGH_PROFIT_THRESHOLD_BPS:
        slippage = HIGH_PROFIT_SLIPPAGE_BPS

    if hop_count > MULTI_HOP_THRESHOLD:
        slippage = _apply_multiplier(slippage, MULTI_HOP_MULTIPLIER)

    if liquidity_score is not None and liquidity_score < LOW_LIQUIDITY_SCORE:
        slippage = _apply_multiplier(slippage, LOW_LIQUIDITY_MULTIPLIER)

    if gas_price_gwei is not None and gas_price_gwei > CONGESTION_GAS_GWEI:
        slippage = _apply_multiplier(slippage, CONGESTION_MULTIPLIER)

    final = min(slippage, MAX_SLIPPAGE_BPS)

    logger.debug(
        f"Dynamic slippage: {final} bps (profit {profit_bps} bps, "
        f"hops {hop_count}, liquidity score {liquidity_score}, "
        f"gas {gas_price_gwei} gwei)"
    )

    return final
