"""
Unit tests for dex_scanner/dedup.py

Verifies the profit gate, key-based deduplication, TTL expiry and bounded
cache trimming.
"""

import unittest

from dex_scanner.dedup import OpportunityFilter, opportunity_key
from dex_scanner.interfaces import DeterministicClock


def plain(path, venues, profit_bps):
    return {
        "path": path,
        "venues": venues,
        "input_amount": "10000",
        "output_amount": "10100",
        "profit": "100",
        "profit_bps": profit_bps,
        "timestamp": 0.0,
    }


class TestOpportunityKey(unittest.TestCase):
    def test_key_includes_path_and_venues(self):
        self.assertEqual(
            opportunity_key(["USDC", "WETH", "USDC"], ["uni", "sushi"]),
            "USDC-WETH-USDC|uni-sushi",
        )

    def test_venue_order_matters(self):
        self.assertNotEqual(
            opportunity_key(["A", "B", "A"], ["x", "y"]),
            opportunity_key(["A", "B", "A"], ["y", "x"]),
        )


class TestOpportunityFilter(unittest.TestCase):
    def setUp(self):
        self.clock = DeterministicClock()
        self.filter = OpportunityFilter(
            min_profit_bps=50, max_size=4, ttl_sec=60.0, clock=self.clock
        )

    def test_is_available(self):
        self.assertTrue(self.filter.is_available())

    def test_drops_below_threshold(self):
        result = self.filter.filter_opportunities(
            [
                plain(["A", "B", "A"], ["x", "y"], 49),
                plain(["A", "C", "A"], ["x", "y"], 50),
            ]
        )
        self.assertEqual([o["path"][1] for o in result], ["C"])
        self.assertEqual(self.filter.get_stats()["below_threshold"], 1)

    def test_drops_duplicates_in_same_batch(self):
        opp = plain(["A", "B", "A"], ["x", "y"], 100)
        result = self.filter.filter_opportunities([opp, dict(opp)])
        self.assertEqual(len(result), 1)
        self.assertEqual(self.filter.get_stats()["duplicates_found"], 1)

    def test_same_path_other_venues_kept(self):
        result = self.filter.filter_opportunities(
            [
                plain(["A", "B", "A"], ["x", "y"], 100),
                plain(["A", "B", "A"], ["y", "x"], 100),
            ]
        )
        self.assertEqual(len(result), 2)

    def test_preserves_order_and_shape(self):
        batch = [
            plain(["A", "B", "A"], ["x", "y"], 300),
            plain(["A", "C", "A"], ["x", "y"], 100),
        ]
        self.assertEqual(self.filter.filter_opportunities(batch), batch)

    def test_key_expires_after_ttl(self):
        self.assertFalse(self.filter.check_duplicate("k"))
        self.clock.advance_time(30)
        self.assertTrue(self.filter.check_duplicate("k"))
        self.clock.advance_time(31)
        self.assertFalse(self.filter.check_duplicate("k"))

    def test_no_ttl_remembers_until_trimmed(self):
        f = OpportunityFilter(max_size=4, ttl_sec=None, clock=self.clock)
        f.check_duplicate("k")
        self.clock.advance_time(10_000)
        self.assertTrue(f.check_duplicate("k"))

    def test_cache_trimmed_to_half(self):
        for i in range(4):
            self.filter.check_duplicate(f"k{i}")
        self.assertEqual(len(self.filter.seen_keys), 4)

        self.filter.check_duplicate("k4")

        # Oldest half dropped, then the new key added
        self.assertEqual(list(self.filter.seen_keys), ["k2", "k3", "k4"])
        self.assertEqual(self.filter.get_stats()["cache_trims"], 1)
        self.assertFalse(self.filter.check_duplicate("k0"))

    def test_reset(self):
        self.filter.check_duplicate("k")
        self.filter.reset()
        self.assertEqual(
            self.filter.get_stats(),
            {
                "tracked_keys": 0,
                "total_checked": 0,
                "duplicates_found": 0,
                "below_threshold": 0,
                "cache_trims": 0,
            },
        )

    def test_max_size_validated(self):
        with self.assertRaises(ValueError):
            OpportunityFilter(max_size=1)


if __name__ == "__main__":
    unittest.main()
