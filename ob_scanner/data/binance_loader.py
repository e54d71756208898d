import requests
import pandas as pd
import logging
from typing import List

from ob_scanner.models import InstrumentSnapshot

logger = logging.getLogger("OBScanner.Data")

KLINE_COLUMNS = ["time", "open", "high", "low", "close", "volume"]

class BinanceFuturesClient:
    def __init__(self, base_url: str = "https://fapi.binance.com", timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict = None):
        url = f"{self.base_url}{path}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        if response.status_code != 200:
            logger.error(f"Request to {path} failed: {response.status_code} | Body: {response.text[:500]}")
        response.raise_for_status()
        return response.json()

    def get_top_volume_coins(self, limit: int) -> List[InstrumentSnapshot]:
        """
        Fetches the USDT perpetual futures symbols ranked by 24h quote volume.
        """
        logger.info(f"Fetching top {limit} volume coins")
        tickers = self._get("/fapi/v1/ticker/24hr")

        coins = []
        for ticker in tickers:
            try:
                symbol = ticker["symbol"]
                volume = float(ticker["quoteVolume"])
                price = float(ticker["lastPrice"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Error parsing ticker data: {ticker} | Error: {e}")
                continue

            # Older symbols may not report a contract type
            contract_type = ticker.get("contractType")
            if not symbol.endswith("USDT") or contract_type not in (None, "PERPETUAL"):
                continue

            coins.append((volume, InstrumentSnapshot(
                id=symbol,
                name=symbol.replace("USDT", ""),
                current_price=price,
                volume=format_volume(volume),
            )))

        logger.info(f"Found {len(coins)} USDT perpetual futures symbols before sorting/limiting.")
        coins.sort(key=lambda item: item[0], reverse=True)
        return [coin for _, coin in coins[:limit]]

    def fetch_klines(self, symbol: str, interval: str, limit: int = 200) -> pd.DataFrame:
        """
        Fetches OHLCV candles for a symbol, oldest first.
        'time' is the candle open time in epoch milliseconds.
        """
        logger.debug(f"Fetching klines for {symbol} ({interval}), limit={limit}")
        rows = self._get("/fapi/v1/klines", params={"symbol": symbol, "interval": interval, "limit": limit})

        df = pd.DataFrame([row[:6] for row in rows], columns=KLINE_COLUMNS)
        df["time"] = df["time"].astype("int64")
        for col in KLINE_COLUMNS[1:]:
            df[col] = df[col].astype(float)
        return df


def format_volume(volume: float) -> str:
    """Formats a quote volume as a short label: 1.2B, 3.4M, 5.6K, 789."""
    if volume >= 1_000_000_000:
        return f"{volume / 1_000_000_000:.1f}B"
    elif volume >= 1_000_000:
        return f"{volume / 1_000_000:.1f}M"
    elif volume >= 1_000:
        return f"{volume / 1_000:.1f}K"
    return f"{volume:.0f}"

