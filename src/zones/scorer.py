"""
Zone Confidence Scorer
======================

Weighted model turning indicator flags into a 0-100 strength,
blended with historical accuracy into a trade success probability:

    strength    = RSI(30, graded) + EMA(35, binary) + MACD(20, graded) + Momentum(15, ungated)
    probability = strength * 0.7 + historical_accuracy * 0.3

Confidence buckets on probability: High >= 70, Medium >= 40, Low below.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from src.core.models import CoinSnapshot
from src.processors.indicators import macd_histogram, momentum_consistency
from src.zones.models import (
    Confidence, IndicatorFlags, ScoreWeights, ZoneThresholds,
    DEFAULT_WEIGHTS, DEFAULT_THRESHOLDS,
)

logger = structlog.get_logger(__name__)


def round_half_up(value: float) -> int:
    """Ties go up (2.5 -> 3), unlike round()"""
    return int(math.floor(value + 0.5))


def confidence_for(probability: float, thresholds: ZoneThresholds = DEFAULT_THRESHOLDS) -> Confidence:
    """Bucket a trade success probability"""
    if probability >= thresholds.high_confidence_min:
        return Confidence.HIGH
    if probability >= thresholds.medium_confidence_min:
        return Confidence.MEDIUM
    return Confidence.LOW


def confidence_color(probability: float, thresholds: ZoneThresholds = DEFAULT_THRESHOLDS) -> str:
    """Display colour for a probability, same boundaries as confidence_for"""
    return {
        Confidence.HIGH: "green",
        Confidence.MEDIUM: "yellow",
        Confidence.LOW: "red",
    }[confidence_for(probability, thresholds)]


@dataclass
class ConfidenceScore:
    strength: int
    trade_success_probability: int
    confidence: Confidence
    historical_accuracy: float = 50.0

    def to_dict(self) -> dict:
        return {
            "strength": self.strength,
            "trade_success_probability": self.trade_success_probability,
            "confidence": self.confidence.value,
            "historical_accuracy": self.historical_accuracy,
        }


class ConfidenceScorer:
    """
    Shared by all four directions.

    The flag family decides the RSI grading (oversold vs overbought);
    is_entry only labels the evaluation. History is read, never written.
    """

    def __init__(
        self,
        history_store=None,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
        thresholds: ZoneThresholds = DEFAULT_THRESHOLDS,
    ):
        self.history_store = history_store
        self.weights = weights
        self.thresholds = thresholds

    def historical_accuracy(self, symbol: str) -> float:
        """Win rate of the trailing 10 recorded trades, 50 without history"""
        if self.history_store is None:
            return self.thresholds.default_accuracy

        try:
            history = self.history_store.query(symbol)
        except Exception as e:
            logger.error("historical_accuracy_error", symbol=symbol, error=str(e))
            return self.thresholds.default_accuracy

        if not history:
            return self.thresholds.default_accuracy

        recent = history[-self.thresholds.accuracy_lookback:]
        wins = sum(1 for r in recent if r.is_win)
        return wins / len(recent) * 100

    def raw_strength(
        self,
        snapshot: CoinSnapshot,
        flags: IndicatorFlags,
        histogram: float,
        momentum: float,
    ) -> float:
        """Unclamped weighted sum"""
        t = self.thresholds
        total = 0.0

        if flags.rsi:
            if flags.is_bullish:
                rsi_strength = max(0.0, (t.rsi_oversold - snapshot.rsi) / t.rsi_oversold)
            else:
                rsi_strength = max(0.0, (snapshot.rsi - t.rsi_overbought) / (100 - t.rsi_overbought))
            total += self.weights.rsi * rsi_strength

        if flags.ema:
            total += self.weights.ema

        if flags.macd:
            macd_strength = min(1.0, abs(histogram) * t.macd_strength_scale)
            total += self.weights.macd * macd_strength

        total += self.weights.momentum * momentum / 100
        return total

    def score(
        self,
        snapshot: CoinSnapshot,
        prices: Sequence[float],
        flags: IndicatorFlags,
        is_entry: bool,
        histogram: Optional[float] = None,
    ) -> ConfidenceScore:
        """Strength, trade success probability and confidence for one direction"""
        if histogram is None:
            histogram = macd_histogram(prices)
        momentum = momentum_consistency(prices)

        total = self.raw_strength(snapshot, flags, histogram, momentum)
        strength = round_half_up(min(100.0, max(0.0, total)))

        accuracy = self.historical_accuracy(snapshot.symbol)
        probability = round_half_up(
            strength * self.thresholds.strength_blend + accuracy * self.thresholds.accuracy_blend
        )
        confidence = confidence_for(probability, self.thresholds)

        logger.debug("zone_confidence_scored",
                     symbol=snapshot.symbol,
                     side="entry" if is_entry else "exit",
                     family=flags.family.value,
                     strength=strength,
                     probability=probability,
                     confidence=confidence.value,
                     historical_accuracy=round(accuracy, 1))

        return ConfidenceScore(
            strength=strength,
            trade_success_probability=probability,
            confidence=confidence,
            historical_accuracy=accuracy,
        )
