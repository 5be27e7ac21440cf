"""
Exception hierarchy for the DEX routing and scanning system.

Routing and scanning convert most of these into omissions from results;
they only propagate out of the direct Router/venue calls.
"""

from typing import Any, Dict, Optional


class DexScannerError(Exception):
    """Base exception for all scanner related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(DexScannerError):
    """Raised when there are configuration-related issues."""

    pass


class NoRouteFound(DexScannerError):
    """Raised when no registered venue produced a usable quote."""

    def __init__(
        self,
        token_in: str,
        token_out: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"No route found for {token_in} -> {token_out}", details)
        self.token_in = token_in
        self.token_out = token_out


class VenueNotRegistered(DexScannerError):
    """Raised when a venue name is not in the router registry."""

    def __init__(self, venue: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Venue {venue} not registered", details)
        self.venue = venue


class CapabilityUnsupported(DexScannerError):
    """Raised when a venue lacks an optional capability."""

    def __init__(
        self,
        venue: str,
        capability: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"Venue {venue} does not support {capability}", details)
        self.venue = venue
        self.capability = capability


class ValidationFailed(DexScannerError):
    """Raised when an opportunity fails a risk validation step."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Validation failed: {reason}", details)
        self.reason = reason


class VenueError(DexScannerError):
    """Raised by venue adapters when a quote or pool lookup fails."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.venue = venue
