"""
Routing aggregator: best single-hop route across venues and two-leg
round-trip arbitrage construction.

Precondition: all venues are registered before scanning starts. The
registry is read-only while a scan is active; registering during a scan
raises RuntimeError instead of being silently supported.
"""

import asyncio
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .exceptions import CapabilityUnsupported, NoRouteFound, VenueNotRegistered
from .interfaces import NetworkHandle, get_clock
from .types import ArbitrageOpportunity, Route, build_opportunity
from .opportunity_math import is_profitable
from .utils import get_logger, to_decimal, to_percent
from .venues.base import Capability, VenueAdapter

logger = get_logger(__name__)


class Router:
    """
    Registry of venue adapters keyed by name, in registration order.

    Args:
        clock: Timestamp source for created opportunities (defaults to
            system time)
    """

    def __init__(self, clock=None):
        self._venues: Dict[str, VenueAdapter] = {}
        self._network: Optional[NetworkHandle] = None
        self.clock = clock or get_clock()
        # Set by the scanner for the duration of start_scanning()
        self.scan_active = False

    @property
    def network(self) -> Optional[NetworkHandle]:
        """Shared network-query handle captured at registration, if any."""
        return self._network

    def register_venue(self, name: str, adapter: VenueAdapter) -> None:
        """
        Add a venue to the registry.

        The first adapter exposing a network handle donates it as the shared
        handle for congestion queries.

        Raises:
            RuntimeError: If called while a scan is active
        """
        if self.scan_active:
            raise RuntimeError(
                f"Cannot register venue {name} while scanning; "
                "register all venues before starting the scanner"
            )

        self._venues[name] = adapter
        if self._network is None and getattr(adapter, "network", None) is not None:
            self._network = adapter.network
            logger.debug(f"Captured network handle from venue {name}")

        logger.info(f"Registered venue: {name}")

    def list_venues(self) -> List[str]:
        return list(self._venues.keys())

    def get_venue(self, name: str) -> VenueAdapter:
        try:
            return self._venues[name]
        except KeyError:
            raise VenueNotRegistered(name) from None

    async def _quote_venue(
        self, name: str, adapter: VenueAdapter, token_in: str, token_out: str, amount_in
    ) -> Route:
        quote = await adapter.get_quote(token_in, token_out, amount_in)
        return Route.from_quote(name, quote)

    async def find_best_route(self, token_in: str, token_out: str, amount_in) -> Route:
        """
        Query every venue for token_in -> token_out and keep the best output.

        Venue queries run concurrently. A failing venue is logged and
        skipped. Exact ties go to the venue registered first.

        Raises:
            NoRouteFound: If no venue returned a quote
        """
        amount_in = to_decimal(amount_in)
        venues = [
            (name, adapter)
            for name, adapter in self._venues.items()
            if adapter.supports(Capability.QUOTE)
        ]

        results = await asyncio.gather(
            *(
                self._quote_venue(name, adapter, token_in, token_out, amount_in)
                for name, adapter in venues
            ),
            return_exceptions=True,
        )

        routes: List[Route] = []
        # gather() preserves submission order, i.e. registration order
        for (name, _), result in zip(venues, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(f"Failed to get quote from {name}: {result}")
                continue
            routes.append(result)

        if not routes:
            raise NoRouteFound(token_in, token_out, {"venues": len(venues)})

        # Stable sort keeps registration order among equal outputs
        routes.sort(key=lambda r: r.amount_out, reverse=True)
        best = routes[0]

        logger.debug(
            f"Best route {token_in}->{token_out}: {best.venue} "
            f"amount_out={best.amount_out}"
        )
        return best

    async def find_arbitrage_routes(
        self, base_token: str, intermediate_tokens: Sequence[str], amount
    ) -> List[ArbitrageOpportunity]:
        """
        Find base -> intermediate -> base round trips that end above amount.

        Each intermediate is evaluated independently; a failure on either
        leg skips only that intermediate.
        """
        amount = to_decimal(amount)
        opportunities: List[ArbitrageOpportunity] = []

        for intermediate in intermediate_tokens:
            try:
                leg1 = await self.find_best_route(base_token, intermediate, amount)
                leg2 = await self.find_best_route(
                    intermediate, base_token, leg1.amount_out
                )

                if not is_profitable(amount, leg2.amount_out):
                    continue

                opportunities.append(
                    build_opportunity(
                        path=[base_token, intermediate, base_token],
                        venues=[leg1.venue, leg2.venue],
                        input_amount=amount,
                        output_amount=leg2.amount_out,
                        timestamp=self.clock.current_timestamp(),
                    )
                )
            except Exception as e:
                logger.debug(f"Failed to find route through {intermediate}: {e}")

        return opportunities

    def _require_capability(self, name: str, capability: Capability) -> VenueAdapter:
        adapter = self.get_venue(name)
        if not adapter.supports(capability):
            raise CapabilityUnsupported(name, capability.value)
        return adapter

    async def get_liquidity(self, venue_name: str, token_in: str, token_out: str) -> Decimal:
        """
        Raises:
            VenueNotRegistered: Unknown venue name
            CapabilityUnsupported: Venue has no liquidity lookup
        """
        adapter = self._require_capability(venue_name, Capability.LIQUIDITY)
        return to_decimal(await adapter.get_liquidity(token_in, token_out))

    async def get_price_impact(
        self, venue_name: str, token_in: str, token_out: str, amount
    ) -> Decimal:
        """
        Raises:
            VenueNotRegistered: Unknown venue name
            CapabilityUnsupported: Venue has no price impact lookup
        """
        adapter = self._require_capability(venue_name, Capability.PRICE_IMPACT)
        return to_percent(
            await adapter.get_price_impact(token_in, token_out, to_decimal(amount))
        )
