"""
Venue adapters and the capability abstraction.
"""

from .base import Capability, VenueAdapter
from .network import Web3NetworkHandle
from .v2 import ReserveVenue, swap_out

__all__ = ["Capability", "VenueAdapter", "ReserveVenue", "Web3NetworkHandle", "swap_out"]
