"""
Zone Conditions: Indicator Checks per Signal Direction
======================================================

One evaluator serves all four directions. The direction's condition
family picks the threshold shape:

- OVERSOLD_BULLISH (long entry, cover exit): RSI < 35, Bullish EMA, MACD > 0
- OVERBOUGHT_BEARISH (long exit, short entry): RSI > 70, Bearish EMA, MACD < 0

Also builds the human-readable projected reason and recommendation text.
"""
from typing import Optional, Sequence

import structlog

from src.core.models import CoinSnapshot, EmaSignal
from src.processors.indicators import macd_histogram
from src.zones.models import (
    ConditionFamily, Confidence, IndicatorFlags, SignalDirection,
    ZoneThresholds, DEFAULT_THRESHOLDS, MONITOR_HINTS, profile_for,
)

logger = structlog.get_logger(__name__)


def check_family(
    family: ConditionFamily,
    snapshot: CoinSnapshot,
    prices: Sequence[float],
    thresholds: ZoneThresholds = DEFAULT_THRESHOLDS,
    histogram: Optional[float] = None,
) -> IndicatorFlags:
    """Evaluate one condition family; `histogram` skips the MACD recompute"""
    if histogram is None:
        histogram = macd_histogram(prices)

    if family == ConditionFamily.OVERSOLD_BULLISH:
        return IndicatorFlags(
            family=family,
            rsi=snapshot.rsi < thresholds.rsi_oversold,
            ema=snapshot.ema_signal == EmaSignal.BULLISH,
            macd=histogram > 0,
        )

    return IndicatorFlags(
        family=family,
        rsi=snapshot.rsi > thresholds.rsi_overbought,
        ema=snapshot.ema_signal == EmaSignal.BEARISH,
        macd=histogram < 0,
    )


def check_conditions(
    direction: SignalDirection,
    snapshot: CoinSnapshot,
    prices: Sequence[float],
    thresholds: ZoneThresholds = DEFAULT_THRESHOLDS,
    histogram: Optional[float] = None,
) -> IndicatorFlags:
    """Evaluate the three flags for one direction"""
    if histogram is None:
        histogram = macd_histogram(prices)

    flags = check_family(profile_for(direction).family, snapshot, prices, thresholds, histogram)

    logger.debug("zone_conditions_checked",
                 symbol=snapshot.symbol,
                 type=direction.value,
                 rsi=round(snapshot.rsi, 2),
                 ema_signal=snapshot.ema_signal.value,
                 macd_histogram=round(histogram, 4),
                 flags=flags.as_named_dict())

    return flags


def _plural(n: int) -> str:
    return "" if n == 1 else "s"


def projected_reason(
    flags: IndicatorFlags,
    consecutive_readings: int,
    required: int,
) -> str:
    """Explain why a building signal is not active yet"""
    if 0 < consecutive_readings < required:
        remaining = required - consecutive_readings
        return (
            f"Awaiting {remaining} more confirmation{_plural(remaining)} "
            f"({consecutive_readings}/{required})"
        )

    missing = flags.missing_labels()
    if missing:
        return f"Awaiting: {', '.join(missing)}"

    return "Monitoring for optimal conditions"


def recommendation(
    direction: SignalDirection,
    symbol: str,
    is_active: bool,
    confidence: Confidence,
    trade_success_probability: int,
    flags: IndicatorFlags,
    consecutive_readings: int,
    required: int,
) -> str:
    """Advisory text surfaced to the alert layer"""
    profile = profile_for(direction)
    prob = trade_success_probability

    if not is_active:
        if consecutive_readings > 0:
            remaining = required - consecutive_readings
            return (
                f"{symbol} showing potential {profile.tag} signals ({prob}% success probability). "
                f"Waiting for {remaining} more confirmation{_plural(remaining)}."
            )
        return f"{symbol} not in {profile.tag} zone. Monitor for {MONITOR_HINTS[profile.family]}."

    active = flags.active_labels()

    if confidence == Confidence.HIGH:
        return (
            f"Strong {profile.zone_phrase} active for {symbol}! {prob}% success probability. "
            f"All indicators aligned: {', '.join(active)}. {profile.action_hint}"
        )
    if confidence == Confidence.MEDIUM:
        return (
            f"{profile.zone_phrase} active for {symbol} with {prob}% success probability. "
            f"{' and '.join(active)}. Moderate confidence {profile.opportunity} opportunity."
        )
    return (
        f"Weak {profile.zone_phrase} for {symbol} ({prob}% success probability). "
        f"Limited indicator support. Wait for stronger confirmation."
    )
