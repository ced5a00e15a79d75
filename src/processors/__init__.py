"""Indicator processors"""
from .indicators import ema, macd_histogram, momentum_consistency, rsi, ema_trend_is_bullish

__all__ = ["ema", "macd_histogram", "momentum_consistency", "rsi", "ema_trend_is_bullish"]
