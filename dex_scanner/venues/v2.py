"""
Uniswap V2 style venue backed by in-memory reserves.

Implements quoting with the x*y=k formula (fee embedded in the input),
liquidity lookups, and exact price impact. Used for paper runs and tests;
reserves are set from config or refreshed by the caller.
"""

from decimal import Decimal
from typing import Dict, Optional, Tuple

from ..exceptions import VenueError
from ..interfaces import NetworkHandle
from ..slippage import calculate_price_impact
from ..types import Quote
from ..utils import to_decimal
from .base import Capability, VenueAdapter


def swap_out(
    amount_in: Decimal, reserve_in: Decimal, reserve_out: Decimal, fee: Decimal
) -> Decimal:
    """
    Calculate output amount for a V2 swap using constant-product formula.

    Formula (with fee embedded):
        amountInWithFee = amountIn * (1 - fee)
        amountOut = (amountInWithFee * reserveOut) / (reserveIn + amountInWithFee)

    Args:
        amount_in: Input token amount (in native units)
        reserve_in: Reserve of input token
        reserve_out: Reserve of output token
        fee: Fee as decimal (e.g., 0.003 for 30 bps)

    Returns:
        Output token amount (in native units)

    Raises:
        ValueError: If inputs are invalid (negative, zero reserves, etc.)
    """
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(
            f"Reserves must be positive: in={reserve_in}, out={reserve_out}"
        )
    if fee < 0 or fee >= 1:
        raise ValueError(f"Fee must be in [0, 1): {fee}")

    amount_in_with_fee = amount_in * (Decimal(1) - fee)

    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in + amount_in_with_fee

    return numerator / denominator


class ReserveVenue(VenueAdapter):
    """
    Constant-product venue with one pool per unordered token pair.

    Args:
        name: Venue identifier
        fee_bps: Swap fee in basis points (30 = 0.3%)
        network: Optional shared network handle
    """

    def __init__(
        self,
        name: str,
        fee_bps: int = 30,
        network: Optional[NetworkHandle] = None,
    ):
        super().__init__(
            name,
            capabilities=(
                Capability.QUOTE,
                Capability.LIQUIDITY,
                Capability.PRICE_IMPACT,
            ),
            network=network,
        )
        self.fee = Decimal(fee_bps) / Decimal("10000")
        self._reserves: Dict[Tuple[str, str], Tuple[Decimal, Decimal]] = {}

    def set_reserves(
        self, token_a: str, token_b: str, reserve_a, reserve_b
    ) -> None:
        """Set reserves for the token_a/token_b pool (order-insensitive)."""
        reserve_a = to_decimal(reserve_a)
        reserve_b = to_decimal(reserve_b)
        if reserve_a <= 0 or reserve_b <= 0:
            raise ValueError(f"Reserves must be positive: {reserve_a}, {reserve_b}")
        self._reserves[(token_a, token_b)] = (reserve_a, reserve_b)
        self._reserves[(token_b, token_a)] = (reserve_b, reserve_a)

    def get_reserves(self, token_in: str, token_out: str) -> Tuple[Decimal, Decimal]:
        """Return (reserve_in, reserve_out) or raise VenueError."""
        try:
            return self._reserves[(token_in, token_out)]
        except KeyError:
            raise VenueError(
                f"{self.name}: no pool for {token_in}/{token_out}", venue=self.name
            ) from None

    async def get_quote(self, token_in: str, token_out: str, amount_in) -> Quote:
        amount_in = to_decimal(amount_in)
        reserve_in, reserve_out = self.get_reserves(token_in, token_out)
        amount_out = swap_out(amount_in, reserve_in, reserve_out, self.fee)
        impact = calculate_price_impact(amount_in, reserve_in, reserve_out, self.fee)
        return Quote(
            amount_out=amount_out,
            path=[token_in, token_out],
            price_impact=impact * Decimal("100"),
        )

    async def get_liquidity(self, token_in: str, token_out: str) -> Decimal:
        _, reserve_out = self.get_reserves(token_in, token_out)
        return reserve_out

    async def get_price_impact(self, token_in: str, token_out: str, amount) -> Decimal:
        reserve_in, reserve_out = self.get_reserves(token_in, token_out)
        impact = calculate_price_impact(
            to_decimal(amount), reserve_in, reserve_out, self.fee
        )
        return impact * Decimal("100")
