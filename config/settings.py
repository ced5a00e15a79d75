"""
Coin Zone Configuration
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from pathlib import Path


class Settings(BaseSettings):
    # Project paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).parent.parent / "data")

    # CoinRanking REST endpoint
    COINRANKING_API_BASE: str = "https://api.coinranking.com/v2"
    COINRANKING_API_KEY: str = ""

    # Market universe
    TOP_COINS_LIMIT: int = 100  # Top 100 by market cap, one request
    SPARKLINE_TIME_PERIOD: str = "24h"
    MIN_SPARKLINE_POINTS: int = 14  # Below this, RSI/EMA fall back to neutral
    HTTP_TIMEOUT_S: float = 30.0

    # Polling intervals (seconds)
    POLL_INTERVAL_S: int = 60
    PERFORMANCE_POLL_INTERVAL_S: int = 120  # Performance mode halves the refresh rate
    PERFORMANCE_MODE: bool = False

    # Signal confirmation
    REQUIRED_CONSECUTIVE_READINGS: int = 3
    READING_WINDOW: int = 5  # Readings kept per (symbol, signal type)

    # History retention (days)
    HISTORY_RETENTION_DAYS: int = 7

    # Database
    DB_PATH: Path = Field(default_factory=lambda: Path(__file__).parent.parent / "data" / "zone_history.db")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def poll_interval_s(self) -> int:
        """Effective poll interval given performance mode"""
        if self.PERFORMANCE_MODE:
            return self.PERFORMANCE_POLL_INTERVAL_S
        return self.POLL_INTERVAL_S


settings = Settings()
