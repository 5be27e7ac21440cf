"""
Single source of truth for opportunity profit math.

All amounts are Decimal (or int) and never pass through float.
profit_bps is floor(profit * 10000 / input_amount); both operands are
positive whenever an opportunity exists, so integer division truncation
equals floor.
"""

from decimal import Decimal, getcontext
from typing import Union

from .utils import to_decimal

# High precision for raw on-chain integer amounts (18 decimals and up)
getcontext().prec = 78

BPS_PER_UNIT = Decimal("10000")

Amount = Union[Decimal, int, str]


def compute_profit(input_amount: Amount, output_amount: Amount) -> Decimal:
    """Profit of a round trip: output - input."""
    return to_decimal(output_amount) - to_decimal(input_amount)


def compute_profit_bps(input_amount: Amount, output_amount: Amount) -> int:
    """
    Compute profit in whole basis points.

    Args:
        input_amount: Amount put into the first leg (must be > 0)
        output_amount: Amount returned by the last leg

    Returns:
        floor(profit * 10000 / input_amount) as int

    Raises:
        ValueError: If input_amount is not positive

    Example:
        >>> compute_profit_bps(1000, 1050)
        500
    """
    amount_in = to_decimal(input_amount)
    if amount_in <= 0:
        raise ValueError(f"input_amount must be positive: {amount_in}")

    profit = compute_profit(amount_in, output_amount)
    scaled = profit * BPS_PER_UNIT
    quotient = scaled // amount_in
    # Decimal // truncates toward zero; step down for negative remainders
    if scaled < 0 and quotient * amount_in != scaled:
        quotient -= 1
    return int(quotient)


def is_profitable(input_amount: Amount, output_amount: Amount) -> bool:
    """Strict profitability: output > input."""
    return to_decimal(output_amount) > to_decimal(input_amount)
