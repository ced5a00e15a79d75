"""Core models and the zone history store"""
from .models import CoinSnapshot, EmaSignal, HistoryRecord, AccuracyReport
from .history import InMemoryHistoryStore, SQLiteHistoryStore, entry_zone_accuracy

__all__ = [
    "CoinSnapshot",
    "EmaSignal",
    "HistoryRecord",
    "AccuracyReport",
    "InMemoryHistoryStore",
    "SQLiteHistoryStore",
    "entry_zone_accuracy",
]
