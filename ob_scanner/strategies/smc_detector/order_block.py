"""
SMC Detector - Order Block Detection
Scans the most recent candles for the last opposing candle (C2) before an
impulsive move (C3), backed by FVG, BOS, volume and mitigation checks.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence, Union

import pandas as pd

from ob_scanner.models import (
    OHLCV_COLUMNS,
    Candle,
    DetectionResult,
    InstrumentSnapshot,
    ZoneType,
    candles_to_frame,
)
from .fvg_detector import fvg_depth_ratio, passes_fvg_check
from .models import DetectorConfig, OrderBlock

logger = logging.getLogger("OBScanner.Detector")

WINDOW_SIZE = 5

CandleInput = Union[pd.DataFrame, Sequence[Candle], None]


def detect_order_block(snapshot: InstrumentSnapshot,
                       candles: CandleInput,
                       timeframe: str,
                       config: Optional[DetectorConfig] = None) -> DetectionResult:
    """
    Detect the most recent Order Block for one instrument/timeframe.

    Never raises on bad input: too few candles, missing columns or
    degenerate windows all end in a ZoneType.NONE result with an
    explanatory message.

    Parameters:
    - snapshot: Instrument fields copied into the result
    - candles: DataFrame with [open, high, low, close, volume] (oldest first)
      or a sequence of Candle objects
    - timeframe: Label such as "4h", only used for reporting
    - config: Detection thresholds (defaults to DetectorConfig())

    Returns:
    - DetectionResult
    """
    config = config or DetectorConfig()
    df = _as_frame(candles)

    if df is None or len(df) < WINDOW_SIZE:
        found = 0 if df is None else len(df)
        logger.debug(f"{snapshot.id} ({timeframe}) - Not enough candles for OB analysis. "
                     f"Need >= {WINDOW_SIZE}, found {found}")
        return _default_result(
            snapshot, timeframe,
            "Not enough candlestick data for advanced order block analysis "
            f"(need at least {WINDOW_SIZE} candles)."
        )

    ob = find_order_block(df, config, label=f"{snapshot.id} ({timeframe})")
    if ob is None:
        return _default_result(snapshot, timeframe)

    return _order_block_result(snapshot, timeframe, ob, config)


def find_order_block(df: pd.DataFrame,
                     config: DetectorConfig,
                     label: str = "") -> Optional[OrderBlock]:
    """
    Backward sliding-window scan. The first window that qualifies is the
    most recent one and is returned without looking further back.

    Window for right edge i (chronological):
    C0 = i-4 (BOS reference), C1 = i-3 (FVG reference), C2 = i-2 (OB candidate),
    C3 = i-1 (impulsive candle), C4 = i (current candle).
    """
    if len(df) < WINDOW_SIZE:
        return None

    median = median_volume(df)

    for i in range(len(df) - 1, WINDOW_SIZE - 2, -1):
        c0, c1, c2, c3, c4 = (df.iloc[j] for j in range(i - 4, i + 1))

        if _is_degenerate(c0, c1, c2, c3):
            logger.debug(f"{label} - Skipping window ending at index {i} due to zero volume/range candle.")
            continue

        for bullish in (True, False):
            unmitigated = _matches(df, i, c0, c1, c2, c3, median, config, bullish)
            if unmitigated is not None:
                zone_start = c2['open']
                zone_end = c2['low'] if bullish else c2['high']
                return OrderBlock(
                    zone_type=ZoneType.BULLISH if bullish else ZoneType.BEARISH,
                    price=zone_end,
                    open=c2['open'],
                    high=c2['high'],
                    low=c2['low'],
                    close=c2['close'],
                    zone_start=zone_start,
                    zone_end=zone_end,
                    origin_index=i - 2,
                    impulse_index=i - 1,
                    mitigated=not unmitigated,
                    candle_time=_candle_time(c4),
                )

    return None


def median_volume(df: pd.DataFrame) -> float:
    """Median of every candle's volume in the supplied series, 0.0 if unknown."""
    median = df['volume'].median()
    return 0.0 if pd.isna(median) else float(median)


def is_impulsive(candle, min_body_ratio: float, min_price_change: float, direction_up: bool) -> bool:
    """
    A candle is impulsive when its directional change and its body-to-range
    ratio both exceed the thresholds (strictly).
    """
    open_, close = candle['open'], candle['close']
    candle_range = candle['high'] - candle['low']
    if open_ == 0 or not candle_range > 0:
        return False

    price_change = (close - open_) / open_ if direction_up else (open_ - close) / open_
    body_ratio = abs(close - open_) / candle_range
    return bool(price_change > min_price_change and body_ratio > min_body_ratio)


def is_unmitigated(df: pd.DataFrame, impulse_index: int, zone_low: float, zone_high: float) -> bool:
    """
    True if no candle after the impulse candle trades back into the zone.
    A candle taps the zone when its [low, high] interval overlaps [zone_low, zone_high].
    """
    subsequent = df.iloc[impulse_index + 1:]
    if len(subsequent) == 0:
        return True

    tapped = (subsequent['low'] <= zone_high) & (subsequent['high'] >= zone_low)
    if tapped.any():
        k = impulse_index + 1 + int(tapped.values.argmax())
        logger.debug(f"OB mitigated by candle at index {k} vs OB Zone [{zone_low}, {zone_high}]")
        return False
    return True


def _matches(df, i, c0, c1, c2, c3, median, config: DetectorConfig, bullish: bool) -> Optional[bool]:
    """
    Evaluates every bullish (or bearish) condition for one window.
    Returns None when the window does not qualify, otherwise whether the zone
    is still unmitigated.
    """
    if bullish:
        direction_ok = c2['close'] < c2['open'] and c3['close'] > c3['open']
        bos = c3['close'] > max(c0['high'], c1['high'], c2['high'])
        close_past = c3['close'] >= c2['close']
        zone_edge = c2['low']
    else:
        direction_ok = c2['close'] > c2['open'] and c3['close'] < c3['open']
        bos = c3['close'] < min(c0['low'], c1['low'], c2['low'])
        close_past = c3['close'] <= c2['close']
        zone_edge = c2['high']

    fvg_ok = not config.require_fvg or passes_fvg_check(c1, c3, bullish, config.min_fvg_depth_ratio)
    bos_ok = not config.require_bos or bos
    impulsive = is_impulsive(c3, config.impulsive_min_body_ratio, config.impulsive_min_price_change, bullish)
    close_past_ok = not config.require_c3_close_past_c2 or close_past
    volume_ok = median > 0 and c2['volume'] > median * config.significant_volume_factor

    checks = bool(direction_ok and fvg_ok and bos_ok and impulsive and close_past_ok and volume_ok)

    # Mitigation scans every later candle, so only run it once the rest passed
    unmitigated = None
    if checks:
        zone_low, zone_high = min(c2['open'], zone_edge), max(c2['open'], zone_edge)
        unmitigated = is_unmitigated(df, i - 1, zone_low, zone_high)
    unmitigated_ok = not config.require_unmitigated or bool(unmitigated)

    if logger.isEnabledFor(logging.DEBUG):
        side = "Bullish" if bullish else "Bearish"
        logger.debug(
            f"{side} OB check, window ending at index {i}: direction={direction_ok}, "
            f"FVG={fvg_ok} (depth={fvg_depth_ratio(c1, c3, bullish):.4f}), BOS={bos_ok}, "
            f"impulsive={impulsive}, close_past={close_past_ok}, volume={volume_ok} "
            f"({c2['volume'] / median if median > 0 else 0:.2f}x median), unmitigated={unmitigated_ok}"
        )

    return unmitigated if checks and unmitigated_ok else None


def _is_degenerate(*window) -> bool:
    """Zero volume or zero range breaks the ratio checks."""
    return any(c['volume'] == 0 or (c['high'] - c['low']) == 0 for c in window)


def _as_frame(candles: CandleInput) -> Optional[pd.DataFrame]:
    """Normalizes the input to a numeric OHLCV frame, or None if unusable."""
    if candles is None:
        return None

    if isinstance(candles, pd.DataFrame):
        df = candles
    else:
        candles = list(candles)
        if candles and all(isinstance(c, Candle) for c in candles):
            df = candles_to_frame(candles)
        else:
            try:
                df = pd.DataFrame(candles)
            except (TypeError, ValueError) as e:
                logger.warning(f"Unusable candle input: {e}")
                return None

    if len(df) == 0:
        return df

    missing = [col for col in OHLCV_COLUMNS if col not in df.columns]
    if missing:
        logger.warning(f"Candle data missing columns: {missing}")
        return None

    df = df.reset_index(drop=True).copy()
    for col in OHLCV_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df


def _candle_time(candle) -> Optional[int]:
    for key in ("time", "open_time"):
        if key in candle.index:
            value = candle[key]
            if isinstance(value, (pd.Timestamp, datetime)):
                return int(pd.Timestamp(value).timestamp() * 1000)
            try:
                if pd.isna(value):
                    return None
                if isinstance(value, str):
                    return int(pd.Timestamp(value).timestamp() * 1000)
                return int(value)
            except (TypeError, ValueError) as e:
                logger.debug(f"Unreadable candle time {value!r}: {e}")
                return None
    return None


def _default_result(snapshot: InstrumentSnapshot, timeframe: str, details: Optional[str] = None) -> DetectionResult:
    return DetectionResult(
        instrument=snapshot,
        zone_type=ZoneType.NONE,
        timeframe=timeframe,
        details=details or (
            f"No significant {timeframe.upper()} order block detected based on current advanced SMC logic."
        ),
    )


def _order_block_result(snapshot: InstrumentSnapshot, timeframe: str,
                        ob: OrderBlock, config: DetectorConfig) -> DetectionResult:
    if ob.zone_type == ZoneType.BULLISH:
        pattern = "Last bearish candle (C2) before strong bullish move (C3)"
    else:
        pattern = "Last bullish candle (C2) before strong bearish move (C3)"

    fvg = "with FVG" if config.require_fvg else "with optional FVG"
    bos = "& BOS" if config.require_bos else "and optional BOS"
    state = "Mitigated." if ob.mitigated else "Unmitigated."

    details = (
        f"Potential {timeframe.upper()} Order Block detected near ${ob.price:.2f}. "
        f"OB Zone: ${ob.zone_start:.4f} - ${ob.zone_end:.4f}. "
        f"{pattern} {fvg} {bos}. {state} {config.describe()}. "
        f"Current price: ${snapshot.current_price:.2f}"
    )

    return DetectionResult(
        instrument=snapshot,
        zone_type=ob.zone_type,
        timeframe=timeframe,
        details=details,
        zone_price=float(ob.price),
        zone_open=float(ob.open),
        zone_high=float(ob.high),
        zone_low=float(ob.low),
        zone_close=float(ob.close),
        zone_range_start=float(ob.zone_start),
        zone_range_end=float(ob.zone_end),
        candle_time=ob.candle_time,
    )
