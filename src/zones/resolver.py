"""
Zone Resolver
=============

Collapses the four direction signals of one coin into a single
TradingZone:

1. Active signal, by priority (entry > exit > shortEntry > coverExit)
2. Projected signal, same priority, carrying its reason
3. On-the-fly: direction with the most true flags (>= 2), rescored
4. Hold: Medium confidence, 50%, +/-3% band

The on-the-fly step never touches the tracker.
"""
from typing import Mapping, Optional, Sequence

import structlog

from src.core.models import CoinSnapshot
from src.processors.indicators import macd_histogram
from src.zones.conditions import check_conditions
from src.zones.models import (
    Confidence, PriceRange, SignalDirection, SignalResult, TradingZone,
    ZoneThresholds, ZoneType, DEFAULT_THRESHOLDS, PRIORITY_ORDER, profile_for,
)
from src.zones.scorer import ConfidenceScorer

logger = structlog.get_logger(__name__)


class ZoneResolver:
    """Picks one prioritized zone per coin"""

    def __init__(
        self,
        scorer: Optional[ConfidenceScorer] = None,
        thresholds: ZoneThresholds = DEFAULT_THRESHOLDS,
    ):
        self.scorer = scorer or ConfidenceScorer(thresholds=thresholds)
        self.thresholds = thresholds

    def resolve(
        self,
        snapshot: CoinSnapshot,
        prices: Sequence[float],
        signals: Optional[Mapping[SignalDirection, SignalResult]] = None,
    ) -> TradingZone:
        signals = signals or {}

        for direction in PRIORITY_ORDER:
            signal = signals.get(direction)
            if signal is not None and signal.is_active:
                return self._from_signal(signal, projected=False)

        for direction in PRIORITY_ORDER:
            signal = signals.get(direction)
            if signal is not None and signal.is_projected:
                return self._from_signal(signal, projected=True)

        zone = self._on_the_fly(snapshot, prices)
        if zone is not None:
            return zone

        return self.hold_zone(snapshot)

    def _from_signal(self, signal: SignalResult, projected: bool) -> TradingZone:
        profile = signal.profile
        return TradingZone(
            type=profile.zone_type,
            label=profile.projected_label if projected else profile.active_label,
            confidence=signal.confidence,
            trade_success_probability=signal.trade_success_probability,
            price_range=signal.price_range,
            color=profile.color,
            is_active=not projected,
            is_projected=projected,
            projected_reason=signal.projected_reason if projected else None,
        )

    def _on_the_fly(self, snapshot: CoinSnapshot, prices: Sequence[float]) -> Optional[TradingZone]:
        """Strongest raw condition set, display only"""
        histogram = macd_histogram(prices)

        best_direction = None
        best_flags = None
        for direction in PRIORITY_ORDER:
            flags = check_conditions(direction, snapshot, prices, self.thresholds, histogram)
            # Strict > keeps the earlier direction on ties
            if best_flags is None or flags.valid_count > best_flags.valid_count:
                best_direction, best_flags = direction, flags

        if best_flags is None or best_flags.valid_count < self.thresholds.min_valid_flags:
            return None

        profile = profile_for(best_direction)
        score = self.scorer.score(snapshot, prices, best_flags, profile.is_entry, histogram)

        logger.debug("zone_resolved_on_the_fly",
                     symbol=snapshot.symbol,
                     type=best_direction.value,
                     valid_count=best_flags.valid_count,
                     probability=score.trade_success_probability)

        return TradingZone(
            type=profile.zone_type,
            label=profile.active_label,
            confidence=score.confidence,
            trade_success_probability=score.trade_success_probability,
            price_range=PriceRange.around(snapshot.price, self.thresholds.zone_band_pct),
            color=profile.color,
            is_active=False,
            is_projected=False,
        )

    def hold_zone(self, snapshot: CoinSnapshot) -> TradingZone:
        return TradingZone(
            type=ZoneType.HOLD,
            label="Hold Zone",
            confidence=Confidence.MEDIUM,
            trade_success_probability=self.thresholds.hold_probability,
            price_range=PriceRange.around(snapshot.price, self.thresholds.hold_band_pct),
            color="yellow",
            is_active=False,
            is_projected=False,
        )
