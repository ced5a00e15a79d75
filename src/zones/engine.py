"""
Zone Engine: Main Orchestrator
==============================

Coordinates conditions, tracker, scorer and resolver for every coin.

Flow per coin:
1. Compute MACD histogram once from the sparkline
2. Check conditions for each of the four directions
3. Record validity in the tracker (confirmation state)
4. Score confidence (strength + historical accuracy)
5. Build the SignalResult with recommendation / projected reason
6. Resolve one TradingZone from the four results
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import structlog

from config import settings
from src.core.models import CoinSnapshot
from src.processors.indicators import macd_histogram
from src.zones.conditions import check_conditions, projected_reason, recommendation
from src.zones.models import (
    PriceRange, SignalDirection, SignalResult, TradingZone,
    ZoneThresholds, DEFAULT_THRESHOLDS, PRIORITY_ORDER, profile_for,
)
from src.zones.resolver import ZoneResolver
from src.zones.scorer import ConfidenceScorer
from src.zones.tracker import SignalTracker

logger = structlog.get_logger(__name__)


@dataclass
class CoinEvaluation:
    """All four signals and the resolved zone for one coin"""
    snapshot: CoinSnapshot
    signals: Dict[SignalDirection, SignalResult] = field(default_factory=dict)
    zone: Optional[TradingZone] = None

    def to_dict(self) -> Dict:
        return {
            "symbol": self.snapshot.symbol,
            "price": self.snapshot.price,
            "zone": self.zone.to_dict() if self.zone else None,
            "signals": {d.value: s.to_dict() for d, s in self.signals.items()},
        }


class ZoneEngine:
    """
    Entry/exit zone engine.

    The tracker is the only mutable state. Pass the same engine (or the
    same tracker) across poll cycles so confirmations can accumulate.
    """

    def __init__(
        self,
        tracker: Optional[SignalTracker] = None,
        history_store=None,
        thresholds: ZoneThresholds = DEFAULT_THRESHOLDS,
        min_sparkline_points: int = settings.MIN_SPARKLINE_POINTS,
    ):
        self.tracker = tracker if tracker is not None else SignalTracker()
        self.history_store = history_store
        self.thresholds = thresholds
        self.min_sparkline_points = min_sparkline_points

        self.scorer = ConfidenceScorer(history_store, thresholds=thresholds)
        self.resolver = ZoneResolver(self.scorer, thresholds)

        # Stats
        self._evaluations_total = 0
        self._activations_total = 0

        logger.info("zone_engine_initialized",
                    required_consecutive=self.tracker.required_consecutive,
                    window=self.tracker.window,
                    history=history_store is not None)

    def generate_signal(
        self,
        direction: SignalDirection,
        snapshot: CoinSnapshot,
        prices: Optional[Sequence[float]] = None,
        histogram: Optional[float] = None,
    ) -> SignalResult:
        """Evaluate one direction for one coin, updating the tracker"""
        if prices is None:
            prices = snapshot.prices
        if histogram is None:
            histogram = macd_histogram(prices)

        self._evaluations_total += 1
        profile = profile_for(direction)

        flags = check_conditions(direction, snapshot, prices, self.thresholds, histogram)
        state = self.tracker.evaluate(snapshot.symbol, direction, flags)
        score = self.scorer.score(snapshot, prices, flags, profile.is_entry, histogram)

        required = self.tracker.required_consecutive
        reason = None
        if state.is_projected:
            reason = projected_reason(flags, state.consecutive_readings, required)

        advice = recommendation(
            direction,
            snapshot.symbol,
            state.is_active,
            score.confidence,
            score.trade_success_probability,
            flags,
            state.consecutive_readings,
            required,
        )

        signal = SignalResult(
            symbol=snapshot.symbol,
            name=snapshot.name,
            direction=direction,
            is_active=state.is_active,
            price_range=PriceRange.around(snapshot.price, self.thresholds.zone_band_pct),
            confidence=score.confidence,
            strength=score.strength,
            trade_success_probability=score.trade_success_probability,
            indicators=flags,
            consecutive_readings=state.consecutive_readings,
            recommendation=advice,
            is_projected=state.is_projected,
            projected_reason=reason,
        )

        if state.is_active:
            self._activations_total += 1
            logger.info("zone_signal_active",
                        symbol=snapshot.symbol,
                        type=direction.value,
                        confidence=score.confidence.value,
                        probability=score.trade_success_probability,
                        consecutive=state.consecutive_readings)
        else:
            logger.debug("zone_signal_evaluated",
                         symbol=snapshot.symbol,
                         type=direction.value,
                         status=state.status,
                         valid_count=state.valid_count,
                         consecutive=state.consecutive_readings)

        return signal

    def evaluate_coin(
        self,
        snapshot: CoinSnapshot,
        prices: Optional[Sequence[float]] = None,
    ) -> CoinEvaluation:
        """All four directions plus the resolved zone for one coin"""
        if prices is None:
            prices = snapshot.prices
        histogram = macd_histogram(prices)

        signals = {
            direction: self.generate_signal(direction, snapshot, prices, histogram)
            for direction in PRIORITY_ORDER
        }
        zone = self.resolver.resolve(snapshot, prices, signals)

        return CoinEvaluation(snapshot=snapshot, signals=signals, zone=zone)

    def resolve_zone(
        self,
        snapshot: CoinSnapshot,
        prices: Optional[Sequence[float]] = None,
        signals: Optional[Mapping[SignalDirection, SignalResult]] = None,
    ) -> TradingZone:
        """Resolve from already generated signals without touching the tracker"""
        if prices is None:
            prices = snapshot.prices
        return self.resolver.resolve(snapshot, prices, signals)

    def evaluate_market(
        self,
        snapshots: Iterable[CoinSnapshot],
        sparklines: Optional[Mapping[str, Sequence[float]]] = None,
    ) -> Dict[str, CoinEvaluation]:
        """Evaluate every coin of a poll cycle, keyed by symbol"""
        results: Dict[str, CoinEvaluation] = {}
        for snapshot in snapshots:
            prices = self._prices_for(snapshot, sparklines)
            results[snapshot.symbol] = self.evaluate_coin(snapshot, prices)
        return results

    # ========== SCANS ==========

    def active_signals(
        self,
        direction: SignalDirection,
        snapshots: Iterable[CoinSnapshot],
        sparklines: Optional[Mapping[str, Sequence[float]]] = None,
    ) -> List[SignalResult]:
        """Confirmed signals of one direction, best probability first"""
        found = [s for s in self._scan(direction, snapshots, sparklines) if s.is_active]
        logger.info("zone_scan_active", type=direction.value, found=len(found))
        return sorted(found, key=lambda s: s.trade_success_probability, reverse=True)

    def projected_signals(
        self,
        direction: SignalDirection,
        snapshots: Iterable[CoinSnapshot],
        sparklines: Optional[Mapping[str, Sequence[float]]] = None,
    ) -> List[SignalResult]:
        """Building signals of one direction, best probability first"""
        found = [
            s for s in self._scan(direction, snapshots, sparklines)
            if s.is_projected and not s.is_active
        ]
        logger.info("zone_scan_projected", type=direction.value, found=len(found))
        return sorted(found, key=lambda s: s.trade_success_probability, reverse=True)

    def _scan(
        self,
        direction: SignalDirection,
        snapshots: Iterable[CoinSnapshot],
        sparklines: Optional[Mapping[str, Sequence[float]]],
    ) -> List[SignalResult]:
        results = []
        for snapshot in snapshots:
            prices = self._prices_for(snapshot, sparklines)
            if len(prices) < self.min_sparkline_points:
                continue
            results.append(self.generate_signal(direction, snapshot, prices))
        return results

    @staticmethod
    def _prices_for(
        snapshot: CoinSnapshot,
        sparklines: Optional[Mapping[str, Sequence[float]]],
    ) -> Sequence[float]:
        if sparklines is not None and snapshot.symbol in sparklines:
            return sparklines[snapshot.symbol]
        return snapshot.prices

    def get_stats(self) -> Dict:
        return {
            "evaluations_total": self._evaluations_total,
            "activations_total": self._activations_total,
            "tracked_keys": len(self.tracker),
        }
