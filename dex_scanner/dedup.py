"""
Opportunity filtering and deduplication.

Works on the plain-data form of opportunities (amounts as decimal
strings) so it can sit behind the same interface as an external
accelerated filter engine:

1. Drop entries below the minimum profit threshold
2. Drop entries whose path|venues key was seen within the TTL
3. Keep the seen-key cache bounded by trimming it when full
"""

from collections import OrderedDict
from typing import Any, Dict, List, Optional

from .interfaces import get_clock


def opportunity_key(path: List[str], venues: List[str]) -> str:
    """Stable key from token path and venue sequence."""
    return f"{'-'.join(path)}|{'-'.join(venues)}"


class OpportunityFilter:
    """
    Minimum-profit gate plus seen-key deduplication.

    Args:
        min_profit_bps: Entries with profit_bps below this are dropped
        max_size: Maximum remembered keys; when reached, the oldest half
            is discarded
        ttl_sec: How long a key suppresses repeats (None = until trimmed)
        clock: Time source for TTL expiry
    """

    def __init__(
        self,
        min_profit_bps: int = 50,
        max_size: int = 20000,
        ttl_sec: Optional[float] = 60.0,
        clock=None,
    ):
        if max_size < 2:
            raise ValueError(f"max_size must be at least 2: {max_size}")
        self.min_profit_bps = min_profit_bps
        self.max_size = max_size
        self.ttl_sec = ttl_sec
        self.clock = clock or get_clock()

        # key -> first-seen timestamp, oldest first
        self.seen_keys: "OrderedDict[str, float]" = OrderedDict()

        self.total_checked = 0
        self.duplicates_found = 0
        self.below_threshold = 0
        self.cache_trims = 0

    def is_available(self) -> bool:
        return True

    def cleanup_expired(self, now: float) -> None:
        """Remove keys older than the TTL."""
        if self.ttl_sec is None:
            return
        while self.seen_keys:
            key, seen_at = next(iter(self.seen_keys.items()))
            if now - seen_at <= self.ttl_sec:
                break
            del self.seen_keys[key]

    def _remember(self, key: str, now: float) -> None:
        if len(self.seen_keys) >= self.max_size:
            keep = self.max_size // 2
            while len(self.seen_keys) > keep:
                self.seen_keys.popitem(last=False)
            self.cache_trims += 1
        self.seen_keys[key] = now

    def check_duplicate(self, key: str) -> bool:
        """
        Check a key and remember it.

        Returns:
            True if the key was seen within the TTL
        """
        now = self.clock.current_timestamp()
        self.cleanup_expired(now)

        self.total_checked += 1
        if key in self.seen_keys:
            self.duplicates_found += 1
            return True
        self._remember(key, now)
        return False

    def filter_opportunities(
        self, opportunities: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Filter plain-data opportunities.

        Args:
            opportunities: Dicts with path, venues and profit_bps

        Returns:
            Surviving dicts, same shape, original order
        """
        filtered = []
        for opp in opportunities:
            if int(opp["profit_bps"]) < self.min_profit_bps:
                self.below_threshold += 1
                continue
            if self.check_duplicate(opportunity_key(opp["path"], opp["venues"])):
                continue
            filtered.append(opp)
        return filtered

    def reset(self) -> None:
        self.seen_keys.clear()
        self.total_checked = 0
        self.duplicates_found = 0
        self.below_threshold = 0
        self.cache_trims = 0

    def get_stats(self) -> Dict[str, int]:
        """Get current statistics."""
        return {
            "tracked_keys": len(self.seen_keys),
            "total_checked": self.total_checked,
            "duplicates_found": self.duplicates_found,
            "below_threshold": self.below_threshold,
            "cache_trims": self.cache_trims,
        }
