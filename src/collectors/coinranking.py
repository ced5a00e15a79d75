"""
MARKET DATA COLLECTOR
REST polling of the CoinRanking top-100 list with 24h sparklines.
Derives RSI(14) and the EMA12/EMA26 trend signal per coin.

One request per poll tick, no retry: a failed tick is logged and the
next tick tries again.
"""
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from config import settings
from src.core.models import CoinSnapshot, EmaSignal
from src.processors.indicators import rsi, ema_trend_is_bullish

logger = structlog.get_logger(__name__)


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def parse_sparkline(raw: List[Any]) -> List[float]:
    """Drop null points, parse the rest"""
    return [float(p) for p in raw or [] if p is not None]


def snapshot_from_coin(
    coin: Dict[str, Any],
    min_points: int = settings.MIN_SPARKLINE_POINTS,
) -> Optional[CoinSnapshot]:
    """
    Build a CoinSnapshot from one CoinRanking coin object.

    With fewer than `min_points` sparkline points RSI is neutral (50) and
    the EMA signal follows the sign of the 24h change. Malformed coins
    return None.
    """
    if not isinstance(coin, dict):
        logger.warning("coin_parse_error", error=f"expected object, got {type(coin).__name__}")
        return None

    try:
        prices = parse_sparkline(coin.get("sparkline", []))
        change = _to_float(coin.get("change"))

        if len(prices) < min_points:
            coin_rsi = 50.0
            bullish = change > 0
        else:
            coin_rsi = rsi(prices, 14)
            bullish = ema_trend_is_bullish(prices)

        return CoinSnapshot(
            symbol=coin["symbol"],
            name=coin.get("name", coin["symbol"]),
            price=float(coin["price"]),
            percent_change_24h=change,
            volume=_to_float(coin.get("24hVolume")),
            market_cap=_to_float(coin.get("marketCap")),
            rsi=coin_rsi,
            ema_signal=EmaSignal.BULLISH if bullish else EmaSignal.BEARISH,
            uuid=coin.get("uuid", ""),
            sparkline=tuple(prices),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("coin_parse_error", symbol=coin.get("symbol"), error=f"{type(e).__name__}: {e}")
        return None


class CoinRankingCollector:
    """
    Fetches the top coins with sparklines:
    - GET /coins?limit=100&timePeriod=24h
    - x-access-token header when an API key is configured
    """

    def __init__(
        self,
        base_url: str = settings.COINRANKING_API_BASE,
        api_key: str = settings.COINRANKING_API_KEY,
        limit: int = settings.TOP_COINS_LIMIT,
        time_period: str = settings.SPARKLINE_TIME_PERIOD,
        timeout_s: float = settings.HTTP_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.limit = limit
        self.time_period = time_period
        self.timeout_s = timeout_s
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None

        # Stats
        self._request_count = 0
        self._error_count = 0
        self._last_fetch_time: Optional[float] = None

    async def _ensure_http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"User-Agent": "CoinZone/1.0"}
            if self.api_key:
                headers["x-access-token"] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_s, connect=10.0),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def fetch_coins(self) -> List[Dict[str, Any]]:
        """Raw coin objects, empty list on any fetch failure"""
        client = await self._ensure_http_client()

        try:
            self._request_count += 1
            resp = await client.get(
                "/coins",
                params={"limit": self.limit, "timePeriod": self.time_period},
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.TimeoutException:
            self._error_count += 1
            logger.warning("coins_fetch_timeout")
            return []
        except httpx.HTTPStatusError as e:
            self._error_count += 1
            logger.warning("coins_fetch_http_error", status=e.response.status_code)
            return []
        except (httpx.HTTPError, ValueError) as e:
            self._error_count += 1
            logger.warning("coins_fetch_error", error=f"{type(e).__name__}: {e}")
            return []

        if not isinstance(payload, dict) or payload.get("status") != "success":
            self._error_count += 1
            logger.warning("coins_fetch_bad_status",
                           status=payload.get("status") if isinstance(payload, dict) else None)
            return []

        data = payload.get("data")
        coins = data.get("coins") if isinstance(data, dict) else None
        if not isinstance(coins, list):
            self._error_count += 1
            logger.warning("coins_fetch_bad_payload", data_type=type(data).__name__)
            return []

        self._last_fetch_time = time.time()
        logger.debug("coins_fetched", count=len(coins))
        return coins

    async def fetch_market(self) -> Tuple[List[CoinSnapshot], Dict[str, List[float]]]:
        """Snapshots plus a symbol -> sparkline map for one poll cycle"""
        coins = await self.fetch_coins()

        snapshots: List[CoinSnapshot] = []
        sparklines: Dict[str, List[float]] = {}
        for coin in coins:
            snapshot = snapshot_from_coin(coin)
            if snapshot is None:
                continue
            snapshots.append(snapshot)
            sparklines[snapshot.symbol] = snapshot.prices

        bullish = sum(1 for s in snapshots if s.ema_signal == EmaSignal.BULLISH)
        logger.info("market_snapshot_built",
                    coins=len(snapshots),
                    bullish=bullish,
                    bearish=len(snapshots) - bullish)

        return snapshots, sparklines

    async def stop(self) -> None:
        if self._client:
            await self._client.aclose()
        self._client = None
        logger.info("coinranking_collector_stopped")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "request_count": self._request_count,
            "error_count": self._error_count,
            "last_fetch_time": self._last_fetch_time,
        }
