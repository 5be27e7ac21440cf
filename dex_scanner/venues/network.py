"""
web3-backed network-query handle.

Venues built on the same RPC connection share one of these; the router
captures the first one registered and the validation pipeline uses it to
read congestion (gas price).
"""

import asyncio
from decimal import Decimal

from web3 import Web3

from ..utils import get_logger

logger = get_logger(__name__)


class Web3NetworkHandle:
    """Gas price lookups over a web3 connection."""

    def __init__(self, web3: Web3):
        self.web3 = web3

    @classmethod
    def from_rpc_url(cls, rpc_url: str) -> "Web3NetworkHandle":
        if not rpc_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid RPC URL format: {rpc_url}")
        return cls(Web3(Web3.HTTPProvider(rpc_url)))

    async def get_gas_price_gwei(self) -> Decimal:
        """
        Current gas price in gwei.

        The web3 call is synchronous; run it in the default executor so the
        scan loop is not blocked.
        """
        loop = asyncio.get_running_loop()
        gas_price_wei = await loop.run_in_executor(None, lambda: self.web3.eth.gas_price)
        gas_price_gwei = Web3.from_wei(gas_price_wei, "gwei")
        logger.debug(f"Gas price: {gas_price_gwei:.2f} gwei")
        return Decimal(gas_price_gwei)
