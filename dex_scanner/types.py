"""
Core data types for DEX routing and arbitrage scanning.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .dedup import opportunity_key
from .exceptions import ValidationFailed
from .opportunity_math import compute_profit, compute_profit_bps, is_profitable
from .utils import to_decimal, to_percent


@dataclass(frozen=True)
class Quote:
    """
    A venue's answer to "how much token_out for amount_in of token_in".

    Attributes:
        amount_out: Output amount in native token units
        path: Ordered token sequence the venue routes through
        price_impact: Price impact of the trade in percent
    """

    amount_out: Decimal
    path: List[str]
    price_impact: Decimal = Decimal("0")


@dataclass(frozen=True)
class Route:
    """Single-hop route: the winning quote plus the venue that produced it."""

    venue: str
    amount_out: Decimal
    path: List[str]
    price_impact: Decimal = Decimal("0")

    @classmethod
    def from_quote(cls, venue: str, quote: Quote) -> "Route":
        return cls(
            venue=venue,
            amount_out=to_decimal(quote.amount_out),
            path=list(quote.path),
            price_impact=to_percent(quote.price_impact),
        )


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """
    A multi-hop round trip that returns more of the start token than it used.

    Attributes:
        path: Token path, len(path) == len(venues) + 1
        venues: Venue used for each hop
        input_amount: Amount of path[0] put into the first leg
        output_amount: Amount of path[-1] returned by the last leg
        timestamp: Creation (or refresh) time, Unix seconds
        liquidity_score: Score from liquidity validation, if run
        slippage_bps: Dynamic slippage tolerance, if computed
    """

    path: List[str]
    venues: List[str]
    input_amount: Decimal
    output_amount: Decimal
    timestamp: float = 0.0
    liquidity_score: Optional[int] = None
    slippage_bps: Optional[int] = None

    def __post_init__(self):
        if len(self.path) != len(self.venues) + 1:
            raise ValueError(
                f"path length {len(self.path)} must equal venues length "
                f"{len(self.venues)} + 1"
            )
        object.__setattr__(self, "input_amount", to_decimal(self.input_amount))
        object.__setattr__(self, "output_amount", to_decimal(self.output_amount))

    @property
    def profit(self) -> Decimal:
        return compute_profit(self.input_amount, self.output_amount)

    @property
    def profit_bps(self) -> int:
        return compute_profit_bps(self.input_amount, self.output_amount)

    @property
    def hop_count(self) -> int:
        return len(self.path) - 1

    @property
    def key(self) -> str:
        """Dedup key: path and venue sequence."""
        return opportunity_key(self.path, self.venues)

    def refreshed(self, timestamp: float) -> "ArbitrageOpportunity":
        return replace(self, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """
        Venue-agnostic plain-data form.

        Amounts are exact decimal strings so nothing is lost crossing a
        serialization boundary.
        """
        return {
            "path": list(self.path),
            "venues": list(self.venues),
            "input_amount": str(self.input_amount),
            "output_amount": str(self.output_amount),
            "profit": str(self.profit),
            "profit_bps": self.profit_bps,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArbitrageOpportunity":
        return cls(
            path=list(data["path"]),
            venues=list(data["venues"]),
            input_amount=Decimal(data["input_amount"]),
            output_amount=Decimal(data["output_amount"]),
            timestamp=float(data.get("timestamp", 0.0)),
        )


def build_opportunity(
    path: List[str],
    venues: List[str],
    input_amount: Decimal,
    output_amount: Decimal,
    timestamp: float,
) -> ArbitrageOpportunity:
    """
    Construct an opportunity, refusing anything not strictly profitable.

    Raises:
        ValueError: If output_amount <= input_amount
    """
    if not is_profitable(input_amount, output_amount):
        raise ValueError(
            f"Not profitable: output {output_amount} <= input {input_amount}"
        )
    return ArbitrageOpportunity(
        path=list(path),
        venues=list(venues),
        input_amount=input_amount,
        output_amount=output_amount,
        timestamp=timestamp,
    )


@dataclass
class ValidationResult:
    """Outcome of a validation step."""

    valid: bool
    reason: Optional[str] = None
    score: Optional[int] = None
    opportunity: Optional[ArbitrageOpportunity] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **kwargs) -> "ValidationResult":
        return cls(valid=True, **kwargs)

    @classmethod
    def reject(cls, reason: str, **kwargs) -> "ValidationResult":
        return cls(valid=False, reason=reason, **kwargs)

    def raise_for_status(self) -> "ValidationResult":
        """Raise ValidationFailed if this result is invalid."""
        if not self.valid:
            raise ValidationFailed(self.reason or "invalid", self.details)
        return self
