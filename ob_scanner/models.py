from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

import pandas as pd

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]

class ZoneType(Enum):
    NONE = "None"
    BULLISH = "BullishOB"
    BEARISH = "BearishOB"

@dataclass(frozen=True)
class Candle:
    open_time: int # Epoch millis, as delivered by the exchange
    open: float
    high: float
    low: float
    close: float
    volume: float

@dataclass(frozen=True)
class InstrumentSnapshot:
    id: str
    name: str
    current_price: float
    volume: str # Human label, e.g. "1.2B"

@dataclass(frozen=True)
class DetectionResult:
    instrument: InstrumentSnapshot
    zone_type: ZoneType
    timeframe: str
    details: str
    timestamp: datetime = field(default_factory=datetime.now)
    zone_price: Optional[float] = None
    zone_open: Optional[float] = None
    zone_high: Optional[float] = None
    zone_low: Optional[float] = None
    zone_close: Optional[float] = None
    zone_range_start: Optional[float] = None
    zone_range_end: Optional[float] = None
    candle_time: Optional[int] = None

    @property
    def detected(self) -> bool:
        return self.zone_type != ZoneType.NONE

    def to_dict(self) -> dict:
        """Flat JSON-ready view: instrument fields first, then the zone."""
        data = asdict(self.instrument)
        data.update({
            "zone_type": self.zone_type.value,
            "zone_price": self.zone_price,
            "zone_open": self.zone_open,
            "zone_high": self.zone_high,
            "zone_low": self.zone_low,
            "zone_close": self.zone_close,
            "zone_range_start": self.zone_range_start,
            "zone_range_end": self.zone_range_end,
            "timestamp": self.timestamp.strftime("%H:%M:%S"),
            "timeframe": self.timeframe,
            "details": self.details,
            "candle_time": self.candle_time,
        })
        return data


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """
    Converts a list of Candle objects into the OHLCV DataFrame layout used
    by the loaders and detectors (oldest first, RangeIndex).
    """
    rows = [
        {
            "time": c.open_time,
            "open": c.open,
            "high": c.high,
            "low": c.low,
            "close": c.close,
            "volume": c.volume,
        }
        for c in candles
    ]
    return pd.DataFrame(rows, columns=["time"] + OHLCV_COLUMNS)
