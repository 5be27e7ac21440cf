#!/usr/bin/env python3
"""
DEX arbitrage opportunity scanner CLI.

Builds reserve venues from config, scans for two-leg round trips and logs
validated opportunities. Nothing is executed.

Usage:
    python3 run_scanner.py
    python3 run_scanner.py --config configs/scanner.yaml
    python3 run_scanner.py --config configs/scanner.yaml --once
    python3 run_scanner.py --once --validate
"""

import argparse
import asyncio
import sys
from typing import List

from dotenv import load_dotenv
from tabulate import tabulate

import logging_config
from dex_scanner.bot import ArbitrageBot, build_router
from dex_scanner.config import ConfigError, ScannerConfig, load_config
from dex_scanner.metrics import ScannerMetrics
from dex_scanner.types import ArbitrageOpportunity
from dex_scanner.venues.network import Web3NetworkHandle


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="DEX arbitrage opportunity scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config
  python3 run_scanner.py

  # Single scan (for testing/CI)
  python3 run_scanner.py --config configs/scanner.yaml --once

  # Single scan, validated opportunities only
  python3 run_scanner.py --once --validate

  # Verbose output
  python3 run_scanner.py --debug
        """,
    )

    parser.add_argument(
        "--config",
        default="configs/scanner.yaml",
        help="Path to config YAML file (default: configs/scanner.yaml)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scan and exit (overrides config setting)",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="With --once, run the validation pipeline and list accepted opportunities only",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def format_opportunities(opportunities: List[ArbitrageOpportunity]) -> str:
    """Render scan results as a grid table."""
    rows = [
        [
            " -> ".join(opp.path),
            ", ".join(opp.venues),
            str(opp.input_amount),
            f"{opp.output_amount:.6f}",
            opp.profit_bps,
        ]
        for opp in sorted(opportunities, key=lambda o: o.profit_bps, reverse=True)
    ]
    return tabulate(
        rows,
        headers=["Path", "Venues", "In", "Out", "Profit (bps)"],
        tablefmt="grid",
    )


async def run_loop(bot: ArbitrageBot, config: ScannerConfig, metrics: ScannerMetrics):
    if config.metrics_port is not None:
        await metrics.start_server(port=config.metrics_port)
    try:
        await bot.start()
    finally:
        if config.metrics_port is not None:
            await metrics.stop_server()


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    load_dotenv()

    if args.debug:
        logging_config.setup_debug()
    else:
        logging_config.setup()

    # Load config
    try:
        config = load_config(args.config)
        config.apply_env_overrides()
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    # Override once setting if CLI flag set
    if args.once:
        config.once = True

    try:
        network = (
            Web3NetworkHandle.from_rpc_url(config.rpc_url) if config.rpc_url else None
        )
        metrics = ScannerMetrics()
        router = build_router(config, network=network)
        bot = ArbitrageBot(config, router, metrics=metrics)
    except Exception as e:
        print(f"Initialization failed: {e}", file=sys.stderr)
        return 1

    if not router.list_venues():
        print("No venues configured", file=sys.stderr)
        return 1

    try:
        if config.once:
            opportunities = asyncio.run(bot.run_once(validate=args.validate))
            if opportunities:
                print(format_opportunities(opportunities))
            else:
                print("No opportunities found")
        else:
            asyncio.run(run_loop(bot, config, metrics))
    except KeyboardInterrupt:
        print("\n\nStopped by user")
        print(f"Stats: {bot.get_stats()}")
        return 0
    except Exception as e:
        print(f"Scanner failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
