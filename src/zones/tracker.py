"""
Zone Signal Tracker: Consecutive-Reading Confirmation
=====================================================

Converts transient indicator hits into confirmed signals.

Per (symbol, direction) the tracker keeps the last 5 readings. A signal
is ACTIVE once the trailing run of valid readings reaches 3, PROJECTED
while it is building (or at least one flag is set), and absent otherwise.

State is in memory only. A fresh tracker starts from zero and reaches
the same state again within 3 poll cycles.
"""
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple

import structlog

from config import settings
from src.core.models import now_ms
from src.zones.models import IndicatorFlags, Reading, SignalDirection

logger = structlog.get_logger(__name__)


@dataclass
class SignalState:
    """Confirmation state derived from the reading log"""
    valid_count: int
    is_valid: bool
    consecutive_readings: int
    is_active: bool
    is_projected: bool

    @property
    def status(self) -> str:
        if self.is_active:
            return "confirmed"
        if self.consecutive_readings > 0:
            return "accumulating"
        return "projected" if self.is_projected else "none"


class SignalTracker:
    """
    Rolling reading log keyed by (symbol, direction).

    Construct once per application lifetime and pass it to the engine.
    """

    def __init__(
        self,
        required_consecutive: int = settings.REQUIRED_CONSECUTIVE_READINGS,
        window: int = settings.READING_WINDOW,
    ):
        self.required_consecutive = required_consecutive
        self.window = window
        self._readings: Dict[Tuple[str, SignalDirection], Deque[Reading]] = {}

    def record(
        self,
        symbol: str,
        direction: SignalDirection,
        is_valid: bool,
        timestamp: Optional[int] = None,
    ) -> int:
        """Append a reading and return the trailing consecutive valid count"""
        key = (symbol, direction)
        log = self._readings.get(key)
        if log is None:
            log = deque(maxlen=self.window)
            self._readings[key] = log

        log.append(Reading(
            timestamp=timestamp if timestamp is not None else now_ms(),
            is_valid=is_valid,
            type=direction,
        ))

        consecutive = 0
        for reading in reversed(log):
            if reading.is_valid and reading.type == direction:
                consecutive += 1
            else:
                break

        logger.debug("zone_consecutive_readings",
                     symbol=symbol,
                     type=direction.value,
                     consecutive=consecutive,
                     required=self.required_consecutive)

        return consecutive

    def evaluate(
        self,
        symbol: str,
        direction: SignalDirection,
        flags: IndicatorFlags,
        timestamp: Optional[int] = None,
    ) -> SignalState:
        """Record this evaluation and derive the confirmation state"""
        valid_count = flags.valid_count
        is_valid = flags.is_valid

        consecutive = self.record(symbol, direction, is_valid, timestamp)

        is_active = consecutive >= self.required_consecutive
        is_projected = not is_active and (consecutive > 0 or valid_count >= 1)

        return SignalState(
            valid_count=valid_count,
            is_valid=is_valid,
            consecutive_readings=consecutive,
            is_active=is_active,
            is_projected=is_projected,
        )

    def readings(self, symbol: str, direction: SignalDirection) -> List[Reading]:
        return list(self._readings.get((symbol, direction), ()))

    def reset(self, symbol: Optional[str] = None) -> None:
        """Forget all readings, or only those of one symbol"""
        if symbol is None:
            self._readings.clear()
            return
        for key in [k for k in self._readings if k[0] == symbol]:
            del self._readings[key]

    def __len__(self) -> int:
        return len(self._readings)
