"""
SMC Detector - Fair Value Gap Checks
Gap between the wick of C1 and the wick of C3 left open by the impulse (C3).
"""


def has_bullish_fvg(c1, c3) -> bool:
    """A Bullish FVG: C3.low sits strictly above C1.high."""
    return c1['high'] < c3['low']


def has_bearish_fvg(c1, c3) -> bool:
    """A Bearish FVG: C3.high sits strictly below C1.low."""
    return c1['low'] > c3['high']


def fvg_depth_ratio(c1, c3, bullish: bool) -> float:
    """
    Gap size as a fraction of the impulse candle's range.

    Negative when there is no gap. Returns 0.0 when C3 has no range.
    """
    impulse_range = c3['high'] - c3['low']
    if not impulse_range > 0:
        return 0.0

    if bullish:
        gap_size = c3['low'] - c1['high']
    else:
        gap_size = c1['low'] - c3['high']
    return gap_size / impulse_range


def passes_fvg_check(c1, c3, bullish: bool, min_depth_ratio: float) -> bool:
    """Gap must exist and be at least min_depth_ratio deep."""
    if not c3['high'] - c3['low'] > 0:
        return False
    gap = has_bullish_fvg(c1, c3) if bullish else has_bearish_fvg(c1, c3)
    return bool(gap) and fvg_depth_ratio(c1, c3, bullish) >= min_depth_ratio
