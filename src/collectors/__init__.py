"""Market data collectors"""
from .coinranking import CoinRankingCollector, snapshot_from_coin

__all__ = ["CoinRankingCollector", "snapshot_from_coin"]
