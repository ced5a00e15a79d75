"""
Zone Engine Models
==================

Signal directions, indicator flags, signal results and resolved zones
for the entry/exit zone engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List, Tuple

from src.core.models import now_ms


class SignalDirection(Enum):
    """The four tracked signal types"""
    LONG_ENTRY = "entry"
    LONG_EXIT = "exit"
    SHORT_ENTRY = "shortEntry"
    COVER_EXIT = "coverExit"


class ConditionFamily(Enum):
    """Threshold shape shared by two directions"""
    OVERSOLD_BULLISH = "OVERSOLD_BULLISH"      # RSI < 35, Bullish EMA, MACD > 0
    OVERBOUGHT_BEARISH = "OVERBOUGHT_BEARISH"  # RSI > 70, Bearish EMA, MACD < 0


class Confidence(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ZoneType(Enum):
    ENTRY = "entry"
    EXIT = "exit"
    SHORT_ENTRY = "shortEntry"
    COVER_EXIT = "coverExit"
    HOLD = "hold"


# Resolution priority when several directions qualify at once
PRIORITY_ORDER: Tuple[SignalDirection, ...] = (
    SignalDirection.LONG_ENTRY,
    SignalDirection.LONG_EXIT,
    SignalDirection.SHORT_ENTRY,
    SignalDirection.COVER_EXIT,
)


FLAG_NAMES: Dict[ConditionFamily, Tuple[str, str, str]] = {
    ConditionFamily.OVERSOLD_BULLISH: ("rsiOversold", "emaCrossover", "macdPositive"),
    ConditionFamily.OVERBOUGHT_BEARISH: ("rsiOverbought", "emaBearishCrossover", "macdNegative"),
}

# Shown in projected reasons for flags that are still false
MISSING_LABELS: Dict[ConditionFamily, Tuple[str, str, str]] = {
    ConditionFamily.OVERSOLD_BULLISH: ("RSI < 35 (oversold)", "Bullish EMA crossover", "Positive MACD"),
    ConditionFamily.OVERBOUGHT_BEARISH: ("RSI > 70 (overbought)", "Bearish EMA crossover", "Negative MACD"),
}

# Shown in recommendations for flags that are true
ACTIVE_LABELS: Dict[ConditionFamily, Tuple[str, str, str]] = {
    ConditionFamily.OVERSOLD_BULLISH: ("oversold RSI", "bullish EMA", "positive MACD"),
    ConditionFamily.OVERBOUGHT_BEARISH: ("overbought RSI", "bearish EMA", "negative MACD"),
}

MONITOR_HINTS: Dict[ConditionFamily, str] = {
    ConditionFamily.OVERSOLD_BULLISH: "RSI < 35, bullish EMA crossover, and positive MACD",
    ConditionFamily.OVERBOUGHT_BEARISH: "RSI > 70, bearish EMA crossover, and negative MACD",
}


@dataclass(frozen=True)
class IndicatorFlags:
    """
    Three condition flags for one direction.

    `family` is the discriminant: it fixes which names the flags carry
    and which threshold branch the scorer reads.
    """
    family: ConditionFamily
    rsi: bool = False
    ema: bool = False
    macd: bool = False

    @property
    def values(self) -> Tuple[bool, bool, bool]:
        return (self.rsi, self.ema, self.macd)

    @property
    def valid_count(self) -> int:
        return sum(1 for v in self.values if v)

    @property
    def is_valid(self) -> bool:
        """At least 2 of 3 flags"""
        return self.valid_count >= 2

    @property
    def is_bullish(self) -> bool:
        return self.family == ConditionFamily.OVERSOLD_BULLISH

    def names(self) -> Tuple[str, str, str]:
        return FLAG_NAMES[self.family]

    def as_named_dict(self) -> Dict[str, bool]:
        return dict(zip(self.names(), self.values))

    def missing_labels(self) -> List[str]:
        return [label for label, v in zip(MISSING_LABELS[self.family], self.values) if not v]

    def active_labels(self) -> List[str]:
        return [label for label, v in zip(ACTIVE_LABELS[self.family], self.values) if v]


@dataclass(frozen=True)
class DirectionProfile:
    """Static description of a signal direction"""
    direction: SignalDirection
    family: ConditionFamily
    is_entry: bool
    zone_type: ZoneType
    tag: str                 # "LONG entry"
    zone_phrase: str         # "LONG buy zone"
    active_label: str
    projected_label: str
    color: str
    action_hint: str
    opportunity: str


DIRECTION_PROFILES: Dict[SignalDirection, DirectionProfile] = {
    SignalDirection.LONG_ENTRY: DirectionProfile(
        direction=SignalDirection.LONG_ENTRY,
        family=ConditionFamily.OVERSOLD_BULLISH,
        is_entry=True,
        zone_type=ZoneType.ENTRY,
        tag="LONG entry",
        zone_phrase="LONG buy zone",
        active_label="Smart Entry Active",
        projected_label="Potential Long Entry",
        color="green",
        action_hint="Consider entry with tight stop-loss.",
        opportunity="entry",
    ),
    SignalDirection.LONG_EXIT: DirectionProfile(
        direction=SignalDirection.LONG_EXIT,
        family=ConditionFamily.OVERBOUGHT_BEARISH,
        is_entry=False,
        zone_type=ZoneType.EXIT,
        tag="LONG exit",
        zone_phrase="LONG sell zone",
        active_label="Dynamic Exit Recommended",
        projected_label="Potential Long Exit",
        color="red",
        action_hint="Consider taking profits.",
        opportunity="exit",
    ),
    SignalDirection.SHORT_ENTRY: DirectionProfile(
        direction=SignalDirection.SHORT_ENTRY,
        family=ConditionFamily.OVERBOUGHT_BEARISH,
        is_entry=True,
        zone_type=ZoneType.SHORT_ENTRY,
        tag="SHORT entry",
        zone_phrase="SHORT entry zone",
        active_label="Short Entry",
        projected_label="Potential Short Entry",
        color="red",
        action_hint="Consider short entry with tight stop-loss.",
        opportunity="short",
    ),
    SignalDirection.COVER_EXIT: DirectionProfile(
        direction=SignalDirection.COVER_EXIT,
        family=ConditionFamily.OVERSOLD_BULLISH,
        is_entry=False,
        zone_type=ZoneType.COVER_EXIT,
        tag="COVER exit",
        zone_phrase="COVER exit zone",
        active_label="Cover Exit",
        projected_label="Potential Cover Exit",
        color="green",
        action_hint="Consider covering short position.",
        opportunity="cover",
    ),
}


def profile_for(direction: SignalDirection) -> DirectionProfile:
    return DIRECTION_PROFILES[direction]


@dataclass(frozen=True)
class PriceRange:
    low: float
    high: float

    @classmethod
    def around(cls, price: float, pct: float) -> "PriceRange":
        """Symmetric band of +/- pct around price"""
        return cls(low=price * (1 - pct), high=price * (1 + pct))

    def to_dict(self) -> Dict[str, float]:
        return {"low": self.low, "high": self.high}


@dataclass(frozen=True)
class Reading:
    """One evaluation outcome kept in the confirmation window"""
    timestamp: int
    is_valid: bool
    type: SignalDirection


@dataclass
class SignalResult:
    """
    Output of one signal evaluation for one coin and direction.
    Built fresh on every call and not mutated afterwards.
    """
    symbol: str
    name: str
    direction: SignalDirection
    is_active: bool
    price_range: PriceRange
    confidence: Confidence
    strength: int                       # 0-100
    trade_success_probability: int      # 0-100
    indicators: IndicatorFlags
    consecutive_readings: int
    recommendation: str
    timestamp: int = field(default_factory=now_ms)
    is_projected: bool = False
    projected_reason: Optional[str] = None

    @property
    def profile(self) -> DirectionProfile:
        return profile_for(self.direction)

    def to_dict(self) -> Dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "type": self.direction.value,
            "is_active": self.is_active,
            "price_range": self.price_range.to_dict(),
            "confidence": self.confidence.value,
            "strength": self.strength,
            "trade_success_probability": self.trade_success_probability,
            "timestamp": self.timestamp,
            "indicators": self.indicators.as_named_dict(),
            "consecutive_readings": self.consecutive_readings,
            "recommendation": self.recommendation,
            "is_projected": self.is_projected,
            "projected_reason": self.projected_reason,
        }


@dataclass
class TradingZone:
    """Resolved, display-ready zone for one coin"""
    type: ZoneType
    label: str
    confidence: Confidence
    trade_success_probability: int
    price_range: PriceRange
    color: str
    is_active: bool = False
    is_projected: bool = False
    projected_reason: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "label": self.label,
            "confidence": self.confidence.value,
            "trade_success_probability": self.trade_success_probability,
            "price_range": self.price_range.to_dict(),
            "color": self.color,
            "is_active": self.is_active,
            "is_projected": self.is_projected,
            "projected_reason": self.projected_reason,
        }


# ============================================================
# ZONE THRESHOLDS
# ============================================================

@dataclass(frozen=True)
class ScoreWeights:
    """Confidence model weights, sum to 100"""
    rsi: float = 30.0
    ema: float = 35.0
    macd: float = 20.0
    momentum: float = 15.0


@dataclass(frozen=True)
class ZoneThresholds:
    """Thresholds for condition evaluation, scoring and resolution"""
    # Conditions
    rsi_oversold: float = 35.0
    rsi_overbought: float = 70.0
    min_valid_flags: int = 2

    # Scoring
    macd_strength_scale: float = 10.0   # |hist| * 10, capped at 1
    strength_blend: float = 0.7
    accuracy_blend: float = 0.3
    default_accuracy: float = 50.0
    accuracy_lookback: int = 10         # Trailing trades

    # Confidence buckets (on trade success probability)
    high_confidence_min: int = 70
    medium_confidence_min: int = 40

    # Price bands
    zone_band_pct: float = 0.02
    hold_band_pct: float = 0.03
    hold_probability: int = 50


DEFAULT_WEIGHTS = ScoreWeights()
DEFAULT_THRESHOLDS = ZoneThresholds()
