#!/usr/bin/env python3
"""
Coin Zone Entry Point

Polls the top-100 coins and logs entry/exit zones each cycle.

Usage:
  python run_zones.py                    # Poll every 60s
  python run_zones.py --performance      # Poll every 120s
  python run_zones.py --once             # Single evaluation, then exit
  python run_zones.py --symbols BTC ETH  # Restrict to a few coins
"""
import argparse
import asyncio
import signal
import sys
from pathlib import Path

# Add project root to path (works with absolute paths)
PROJECT_ROOT = Path(__file__).parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

import structlog

from config import settings
from src.collectors.coinranking import CoinRankingCollector
from src.core.history import SQLiteHistoryStore, entry_zone_accuracy
from src.zones.engine import ZoneEngine
from src.zones.runner import ZoneRunner
from src.zones.scorer import confidence_color

logger = structlog.get_logger(__name__)


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Coin Zone Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_zones.py                    # Poll every 60s
  python run_zones.py --performance      # Poll every 120s
  python run_zones.py --once             # Single evaluation, then exit
        """
    )
    parser.add_argument(
        "--performance",
        action="store_true",
        help=f"Performance mode: poll every {settings.PERFORMANCE_POLL_INTERVAL_S}s instead of {settings.POLL_INTERVAL_S}s"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit"
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.DB_PATH,
        help=f"Zone history database (default: {settings.DB_PATH})"
    )
    parser.add_argument(
        "--symbols",
        nargs="*",
        default=None,
        help="Only evaluate these symbols"
    )
    return parser.parse_args()


async def run(args) -> None:
    interval = settings.PERFORMANCE_POLL_INTERVAL_S if args.performance else settings.poll_interval_s

    history = SQLiteHistoryStore(args.db)
    engine = ZoneEngine(history_store=history)
    runner = ZoneRunner(CoinRankingCollector(), engine, interval_s=interval, symbols=args.symbols)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, runner.stop)
        except NotImplementedError:
            # Windows event loops
            pass

    try:
        await runner.run(max_ticks=1 if args.once else None)
        if args.once:
            print_zone_table(runner.last_results, history)
    finally:
        history.close()


def print_zone_table(results, history) -> None:
    """One line per coin: zone, confidence colour, 7-day closed-trade accuracy"""
    for symbol, result in results.items():
        zone = result.zone
        report = entry_zone_accuracy(history, symbol)
        print(f"{symbol:>8}  {zone.label:<26} {zone.confidence.value:<6} "
              f"{zone.trade_success_probability:>3}% ({confidence_color(zone.trade_success_probability)})  "
              f"[{zone.price_range.low:.6g} - {zone.price_range.high:.6g}]  "
              f"acc {report.accuracy:.0f}% ({report.successful_entries}/{report.total_entries})"
              + (f"  {zone.projected_reason}" if zone.projected_reason else ""))


def main():
    args = parse_args()
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")
    logger.info("zone_shutdown_complete")


if __name__ == "__main__":
    main()
