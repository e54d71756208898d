import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

import requests

from ob_scanner.models import DetectionResult, InstrumentSnapshot, ZoneType
from ob_scanner.strategies.smc_detector import WINDOW_SIZE, DetectorConfig, detect_order_block

logger = logging.getLogger("OBScanner.Scanner")

class OrderBlockScanner:
    """
    Runs the detector over the top-volume instruments and keeps the latest
    result per instrument in memory.
    """
    def __init__(self, client, journal=None, max_workers: int = 1):
        self.client = client
        self.journal = journal
        self.max_workers = max(1, int(max_workers))
        self._results: Dict[str, DetectionResult] = {}
        self._lock = threading.Lock()

    def scan(self, interval: str, config: DetectorConfig, coin_limit: int = 100,
             kline_limit: int = 200) -> List[DetectionResult]:
        """
        Scans up to coin_limit instruments on one timeframe.
        Returns the detector results in instrument ranking order; instruments
        without enough candles are cached but not returned.
        """
        try:
            coins = self.client.get_top_volume_coins(coin_limit)
        except requests.RequestException as e:
            logger.error(f"Error fetching instruments for {interval} scan: {e}")
            return []

        logger.info(f"Scanning {len(coins)} instruments on {interval} ({config.describe()})")

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(
                    lambda coin: self._scan_coin(coin, interval, config, kline_limit), coins
                ))
        else:
            outcomes = [self._scan_coin(coin, interval, config, kline_limit) for coin in coins]

        results = [r for r in outcomes if r is not None]
        found = sum(1 for r in results if r.detected)
        logger.info(f"Scan complete on {interval}: {found} order blocks in {len(results)} instruments")
        return results

    def latest_results(self) -> Dict[str, DetectionResult]:
        with self._lock:
            return dict(self._results)

    def _scan_coin(self, coin: InstrumentSnapshot, interval: str, config: DetectorConfig,
                   kline_limit: int) -> Optional[DetectionResult]:
        try:
            candles = self.client.fetch_klines(coin.id, interval, kline_limit)
        except (requests.RequestException, ValueError, TypeError) as e:
            logger.error(f"Failed to fetch klines for {coin.id} ({interval}): {e}")
            return None

        if candles is None or len(candles) < WINDOW_SIZE:
            self._store(DetectionResult(
                instrument=coin,
                zone_type=ZoneType.NONE,
                timeframe=interval,
                details="Insufficient candlestick data for analysis in scheduled scan.",
            ))
            return None

        result = detect_order_block(coin, candles, interval, config)
        self._store(result)

        if result.detected:
            logger.info(f"{result.zone_type.value} on {coin.id} ({interval}) at {result.zone_price}")
            if self.journal is not None:
                with self._lock:
                    self.journal.log_result(result)
        return result

    def _store(self, result: DetectionResult):
        with self._lock:
            self._results[result.instrument.id] = result
