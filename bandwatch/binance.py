from __future__ import annotations

import hashlib
import hmac
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .config import (
    BACK_OFF_FACTOR,
    BINANCE_API_KEY,
    BINANCE_BASE_URL,
    BINANCE_SECRET_KEY,
    CANDLE_LIMIT,
    RETRIES,
    TRADE_INTERVAL,
)
from .logger import get_logger
from .models import Candle, candles_from_frame

logger = get_logger(__name__)

PRICE_COLUMNS = ['open', 'high', 'low', 'close', 'volume']


class BinanceClient:
    """API client for Binance exchange with focus on candle history and quotes."""

    # API Endpoints
    KLINES_PATH = "/api/v3/klines"
    TICKER_PATH = "/api/v3/ticker/24hr"
    ACCOUNT_PATH = "/api/v3/account"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url or BINANCE_BASE_URL
        self.api_key = api_key or BINANCE_API_KEY
        self.secret = secret or BINANCE_SECRET_KEY
        self.session = session or requests.Session()

    @property
    def can_sign(self) -> bool:
        return bool(self.api_key and self.secret)

    def _generate_signature(self, params: Dict[str, Any]) -> str:
        query_string = "&".join([f"{k}={v}" for k, v in params.items()])
        return hmac.new(self.secret.encode("utf-8"), query_string.encode("utf-8"), hashlib.sha256).hexdigest()

    @staticmethod
    def _timestamp_ms() -> int:
        return int(time.time() * 1000)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = False,
    ) -> Optional[Any]:
        """Make HTTP request to Binance API, retrying transport errors and rate limits."""
        url = f"{self.base_url}{path}"
        headers = None
        if auth:
            params = dict(params or {})
            params["timestamp"] = self._timestamp_ms()
            params["signature"] = self._generate_signature(params)
            headers = {"X-MBX-APIKEY": self.api_key}

        retry = 0
        while retry < RETRIES:
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=headers,
                )
                response.raise_for_status()
                return response.json()

            except requests.exceptions.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                if status == 429:
                    retry += 1
                    retry_after = exc.response.headers.get("Retry-After")
                    wait_time = int(retry_after) if retry_after else BACK_OFF_FACTOR ** retry
                    logger.warning(f"Rate limit exceeded (429) on {path}. Retrying in {wait_time} seconds... (Attempt {retry}/{RETRIES})")
                    time.sleep(wait_time)
                else:
                    logger.error(f"HTTPError calling {path}: {exc}. No retry for status {status}.")
                    return None

            except requests.exceptions.RequestException as exc:
                retry += 1
                wait_time = BACK_OFF_FACTOR ** retry
                logger.warning(f"RequestException calling {path}: {exc}. Retrying in {wait_time} seconds... (Attempt {retry}/{RETRIES})")
                time.sleep(wait_time)

        logger.error(f"Max retries reached for {path}. Returning None.")
        return None

    def get_historical_klines(
        self,
        symbol: str,
        interval: str = TRADE_INTERVAL,
        limit: int = CANDLE_LIMIT,
    ) -> pd.DataFrame:
        """
        Fetch the most recent klines/candlestick data.

        Args:
            symbol: Trading pair (e.g., 'BTCUSDT')
            interval: Kline interval ('1m','3m','5m','15m','30m','1h','2h','4h','6h','8h','12h','1d','3d','1w','1M')
            limit: Number of klines to fetch (max 1000)

        Returns:
            DataFrame indexed by epoch-millisecond open time with Decimal
            open, high, low, close, volume columns.
        """
        params: Dict[str, Any] = {
            "symbol": symbol.upper(),
            "interval": interval,
            "limit": limit,
        }

        result = self._request("GET", self.KLINES_PATH, params=params)

        if not result:
            return pd.DataFrame()

        df = pd.DataFrame(result, columns=[
            'timestamp', 'open', 'high', 'low', 'close', 'volume',
            'close_time', 'quote_volume', 'trades', 'taker_buy_base',
            'taker_buy_quote', 'ignore'
        ])

        df['timestamp'] = (
            pd.to_numeric(df['timestamp'], errors='coerce')
            .fillna(0)
            .astype('int64')
        )
        # Binance sends prices as strings; keep them exact
        for col in PRICE_COLUMNS:
            df[col] = df[col].map(lambda v: Decimal(str(v)))

        return df.set_index('timestamp')[PRICE_COLUMNS]

    def get_candles(self, symbol: str, interval: str = TRADE_INTERVAL, limit: int = CANDLE_LIMIT) -> List[Candle]:
        return candles_from_frame(self.get_historical_klines(symbol, interval=interval, limit=limit))

    def get_ticker(self, symbol: str) -> Optional[Dict[str, Any]]:
        """Get 24hr ticker price change statistics."""
        return self._request("GET", self.TICKER_PATH, params={"symbol": symbol.upper()})

    def get_last_price(self, symbol: str) -> Optional[Decimal]:
        ticker = self.get_ticker(symbol)
        if not ticker or "lastPrice" not in ticker:
            return None
        try:
            return Decimal(str(ticker["lastPrice"]))
        except InvalidOperation:
            logger.error(f"Malformed last price for {symbol}: {ticker['lastPrice']}")
            return None

    def get_balance(self, asset: str) -> Optional[Decimal]:
        """Free balance of one asset from the signed account endpoint."""
        if not self.can_sign:
            raise ValueError("Missing Binance API credentials. Please check your .env file.")

        account = self._request("GET", self.ACCOUNT_PATH, auth=True)
        if not account:
            return None
        for balance in account.get("balances", []):
            if balance.get("asset") == asset.upper():
                return Decimal(str(balance.get("free", "0")))
        return Decimal(0)
