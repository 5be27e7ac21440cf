"""
DEX routing aggregator and arbitrage opportunity scanner.

Finds the best single-hop route for a token pair across registered venues,
builds two-leg round-trip arbitrage candidates, and runs them through a
staleness, liquidity and price impact validation pipeline in a periodic
scan loop.
"""

from dex_scanner.version import __version__
from dex_scanner.exceptions import (
    CapabilityUnsupported,
    ConfigurationError,
    DexScannerError,
    NoRouteFound,
    ValidationFailed,
    VenueError,
    VenueNotRegistered,
)
from dex_scanner.types import ArbitrageOpportunity, Quote, Route, ValidationResult
from dex_scanner.router import Router
from dex_scanner.scanner import Scanner
from dex_scanner.validation import ValidationPipeline
from dex_scanner.venues import Capability, ReserveVenue, VenueAdapter

PROJECT_NAME = "dex-scanner"

__all__ = [
    "PROJECT_NAME",
    "__version__",
    "ArbitrageOpportunity",
    "Capability",
    "CapabilityUnsupported",
    "ConfigurationError",
    "DexScannerError",
    "NoRouteFound",
    "Quote",
    "ReserveVenue",
    "Route",
    "Router",
    "Scanner",
    "ValidationFailed",
    "ValidationPipeline",
    "ValidationResult",
    "VenueAdapter",
    "VenueError",
    "VenueNotRegistered",
]
