"""
Zone Runner - Polls market data and evaluates zones every interval
Connects CoinRanking collector → Zone engine

Poll interval is 60s, or 120s in performance mode. A tick that yields no
market data is skipped; the tracker is left untouched so confirmations
carry over to the next good tick.
"""
import asyncio
import time
from collections import Counter
from typing import Callable, Dict, List, Optional, Any

import structlog

from config import settings
from src.collectors.coinranking import CoinRankingCollector
from src.zones.engine import CoinEvaluation, ZoneEngine

logger = structlog.get_logger(__name__)


class ZoneRunner:
    """Periodic collector → engine loop"""

    def __init__(
        self,
        collector: CoinRankingCollector,
        engine: ZoneEngine,
        interval_s: Optional[float] = None,
        symbols: Optional[List[str]] = None,
        on_evaluations: Optional[Callable[[Dict[str, CoinEvaluation]], Any]] = None,
    ):
        self.collector = collector
        self.engine = engine
        self.interval_s = interval_s if interval_s is not None else settings.poll_interval_s
        self.symbols = set(symbols) if symbols else None
        self.on_evaluations = on_evaluations

        self._running = False
        self._stop_event: Optional[asyncio.Event] = None
        self._ticks = 0
        self._skipped_ticks = 0
        self._last_results: Dict[str, CoinEvaluation] = {}

    @property
    def last_results(self) -> Dict[str, CoinEvaluation]:
        return self._last_results

    async def run_once(self) -> Dict[str, CoinEvaluation]:
        """One poll tick: fetch, evaluate, summarize"""
        self._ticks += 1
        started = time.time()

        snapshots, sparklines = await self.collector.fetch_market()
        if self.symbols is not None:
            snapshots = [s for s in snapshots if s.symbol in self.symbols]

        if not snapshots:
            self._skipped_ticks += 1
            logger.warning("zone_tick_skipped", tick=self._ticks, reason="no_market_data")
            return {}

        results = self.engine.evaluate_market(snapshots, sparklines)
        self._last_results = results

        zone_counts = Counter(r.zone.type.value for r in results.values() if r.zone)
        active = sorted(
            (r for r in results.values() if r.zone and r.zone.is_active),
            key=lambda r: r.zone.trade_success_probability,
            reverse=True,
        )

        logger.info("zone_tick_complete",
                    tick=self._ticks,
                    coins=len(results),
                    zones=dict(zone_counts),
                    active=[f"{r.snapshot.symbol}:{r.zone.type.value}" for r in active[:10]],
                    elapsed_ms=int((time.time() - started) * 1000))

        if self.on_evaluations:
            try:
                self.on_evaluations(results)
            except Exception as e:
                logger.error("zone_callback_error", error=str(e))

        return results

    async def run(self, max_ticks: Optional[int] = None) -> None:
        """Poll until stop() or max_ticks"""
        self._running = True
        self._stop_event = asyncio.Event()
        logger.info("zone_runner_starting", interval_s=self.interval_s)

        try:
            while self._running:
                await self.run_once()

                if max_ticks is not None and self._ticks >= max_ticks:
                    break

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_s)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            await self.collector.stop()
            logger.info("zone_runner_stopped", ticks=self._ticks, skipped=self._skipped_ticks)

    def stop(self) -> None:
        self._running = False
        if self._stop_event is not None:
            self._stop_event.set()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "ticks": self._ticks,
            "skipped_ticks": self._skipped_ticks,
            "interval_s": self.interval_s,
            "engine": self.engine.get_stats(),
            "collector": self.collector.get_stats(),
        }
