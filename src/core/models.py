"""
Data models for market snapshots and trade history
All models are designed for fast serialization and storage
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum
import time


class EmaSignal(Enum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CoinSnapshot:
    """
    One coin as seen in a single poll cycle.

    rsi and ema_signal are derived upstream from the 14+ point sparkline
    and trusted as-is by the zone engine.
    """
    symbol: str
    name: str
    price: float
    percent_change_24h: float = 0.0
    volume: float = 0.0
    market_cap: float = 0.0
    rsi: float = 50.0                   # 0-100
    ema_signal: EmaSignal = EmaSignal.BEARISH
    uuid: str = ""
    sparkline: Tuple[float, ...] = ()   # Chronological prices

    @property
    def prices(self) -> List[float]:
        return list(self.sparkline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "percent_change_24h": self.percent_change_24h,
            "volume": self.volume,
            "market_cap": self.market_cap,
            "rsi": self.rsi,
            "ema_signal": self.ema_signal.value,
            "uuid": self.uuid,
            "sparkline_points": len(self.sparkline),
        }


@dataclass
class HistoryRecord:
    """
    A past zone entry, optionally closed with an exit.
    Win/loss is read from profit_loss > 0.
    """
    symbol: str
    timestamp: int = field(default_factory=now_ms)  # Entry time, epoch ms
    entry_price: float = 0.0
    exit_price: Optional[float] = None
    profit_loss: Optional[float] = None
    accuracy: float = 0.0
    trade_success_probability: float = 0.0

    @property
    def is_closed(self) -> bool:
        return self.exit_price is not None

    @property
    def is_win(self) -> bool:
        return (self.profit_loss or 0.0) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timestamp": self.timestamp,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "profit_loss": self.profit_loss,
            "accuracy": self.accuracy,
            "trade_success_probability": self.trade_success_probability,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryRecord":
        return cls(
            symbol=data["symbol"],
            timestamp=int(data["timestamp"]),
            entry_price=float(data.get("entry_price", 0.0)),
            exit_price=data.get("exit_price"),
            profit_loss=data.get("profit_loss"),
            accuracy=float(data.get("accuracy", 0.0)),
            trade_success_probability=float(data.get("trade_success_probability", 0.0)),
        )


@dataclass
class AccuracyReport:
    """Closed-trade accuracy over a lookback window"""
    accuracy: float = 0.0
    total_entries: int = 0
    successful_entries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accuracy": self.accuracy,
            "total_entries": self.total_entries,
            "successful_entries": self.successful_entries,
        }
