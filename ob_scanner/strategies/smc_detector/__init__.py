# SMC Detector - Smart Money Concepts Detection Module
from .models import DetectorConfig, OrderBlock
from .fvg_detector import has_bullish_fvg, has_bearish_fvg, fvg_depth_ratio
from .order_block import (
    WINDOW_SIZE,
    detect_order_block,
    find_order_block,
    is_impulsive,
    is_unmitigated,
    median_volume,
)
