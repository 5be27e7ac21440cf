"""
Venue adapter interface with an explicit capability set.

Every venue can quote. Liquidity and price-impact lookups are optional;
a venue declares them in `capabilities` and callers check `supports()`
instead of probing for methods.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from ..exceptions import CapabilityUnsupported
from ..interfaces import NetworkHandle
from ..types import Quote


class Capability(Enum):
    """Optional venue capabilities."""

    QUOTE = "quote"
    LIQUIDITY = "liquidity"
    PRICE_IMPACT = "price_impact"


class VenueAdapter(ABC):
    """
    Base class for one trading venue.

    Attributes:
        name: Venue identifier
        capabilities: Capabilities this venue implements
        network: Optional shared network-query handle (congestion lookups)
    """

    def __init__(
        self,
        name: str,
        capabilities: Iterable[Capability] = (Capability.QUOTE,),
        network: Optional[NetworkHandle] = None,
    ):
        self.name = name
        self.capabilities: FrozenSet[Capability] = frozenset(capabilities) | {
            Capability.QUOTE
        }
        self.network = network

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @abstractmethod
    async def get_quote(self, token_in: str, token_out: str, amount_in: Decimal) -> Quote:
        """Quote swapping amount_in of token_in for token_out."""

    async def get_liquidity(self, token_in: str, token_out: str) -> Decimal:
        """Available liquidity for the pair, in token_out units."""
        raise CapabilityUnsupported(self.name, Capability.LIQUIDITY.value)

    async def get_price_impact(
        self, token_in: str, token_out: str, amount: Decimal
    ) -> Decimal:
        """Price impact of trading amount, in percent."""
        raise CapabilityUnsupported(self.name, Capability.PRICE_IMPACT.value)

    def __repr__(self) -> str:
        caps = ",".join(sorted(c.value for c in self.capabilities))
        return f"{type(self).__name__}(name={self.name!r}, capabilities={caps})"
