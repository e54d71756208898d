import csv
import os
import logging
from datetime import datetime

from ob_scanner.models import DetectionResult

logger = logging.getLogger("OBScanner.Journal")

HEADERS = [
    "Scan Time", "Symbol", "Name", "Timeframe", "Type", "OB Price",
    "Zone Start", "Zone End", "Candle Time", "Current Price", "Volume", "Details"
]

class ScanJournal:
    def __init__(self, filename: str = "order_blocks.csv"):
        self.filename = filename
        self._initialize_csv()

    def _initialize_csv(self):
        """Creates the CSV file with headers if it doesn't exist."""
        if not os.path.exists(self.filename):
            try:
                with open(self.filename, mode='w', newline='') as f:
                    writer = csv.writer(f)
                    writer.writerow(HEADERS)
                logger.info(f"Journal: Created new order block log at {self.filename}")
            except OSError as e:
                logger.error(f"Journal: Failed to initialize CSV: {e}")

    def log_result(self, result: DetectionResult, scanned_at: datetime = None):
        """
        Appends a detected order block to the CSV file.
        Results without a zone are ignored.
        """
        if not result.detected:
            return False

        scanned_at = scanned_at or result.timestamp
        row = [
            scanned_at.strftime("%Y-%m-%d %H:%M:%S"),
            result.instrument.id,
            result.instrument.name,
            result.timeframe,
            result.zone_type.value,
            result.zone_price,
            result.zone_range_start,
            result.zone_range_end,
            result.candle_time,
            result.instrument.current_price,
            result.instrument.volume,
            result.details,
        ]

        try:
            with open(self.filename, mode='a', newline='') as f:
                writer = csv.writer(f)
                writer.writerow(row)
        except OSError as e:
            logger.error(f"Journal: Error logging order block for {result.instrument.id}: {e}")
            return False

        logger.info(f"Journal: Logged {result.zone_type.value} for {result.instrument.id} ({result.timeframe}).")
        return True
