"""
Zone Engine: Entry/Exit Zone Signals
====================================

Turns per-coin indicator snapshots into confirmed trading zones.

Key properties:
- Four directions: long entry, long exit, short entry, cover exit
- A signal needs 2 of 3 flags to be valid
- A valid signal needs 3 consecutive readings to be active
- One prioritized zone per coin (active > projected > strongest > hold)

Components:
- models.py: Directions, flags, signals, zones, thresholds
- conditions.py: Indicator checks and advisory text
- scorer.py: Strength / probability / confidence
- tracker.py: Consecutive-reading confirmation
- resolver.py: Zone priority resolution
- engine.py: Main orchestrator
- runner.py: Poll loop
"""

from src.zones.models import (
    SignalDirection,
    ConditionFamily,
    Confidence,
    ZoneType,
    IndicatorFlags,
    PriceRange,
    SignalResult,
    TradingZone,
)
from src.zones.engine import ZoneEngine, CoinEvaluation
from src.zones.tracker import SignalTracker

__all__ = [
    "SignalDirection",
    "ConditionFamily",
    "Confidence",
    "ZoneType",
    "IndicatorFlags",
    "PriceRange",
    "SignalResult",
    "TradingZone",
    "ZoneEngine",
    "CoinEvaluation",
    "SignalTracker",
]
