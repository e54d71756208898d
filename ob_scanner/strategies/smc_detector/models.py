"""
SMC Detector - Data Models
Detector thresholds and the Order Block match record.
"""
from dataclasses import dataclass, fields
from typing import Optional

from ob_scanner.models import ZoneType

@dataclass(frozen=True)
class DetectorConfig:
    """Thresholds and toggles for order block detection."""
    impulsive_min_body_ratio: float = 0.15     # Body / range of the impulse candle
    impulsive_min_price_change: float = 0.0005 # Fractional open->close move
    significant_volume_factor: float = 0.6     # Multiple of median volume for C2
    require_bos: bool = True
    require_c3_close_past_c2: bool = True
    require_fvg: bool = True
    require_unmitigated: bool = True
    min_fvg_depth_ratio: float = 0.05          # Gap / impulse range, only with require_fvg

    @classmethod
    def from_dict(cls, values: Optional[dict]) -> "DetectorConfig":
        """Builds a config from a YAML section. Unknown keys are ignored."""
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    def describe(self) -> str:
        enabled = [
            name for name, on in (
                ("BOS", self.require_bos),
                ("FVG", self.require_fvg),
                ("C3 close past C2", self.require_c3_close_past_c2),
                ("Unmitigated", self.require_unmitigated),
            ) if on
        ]
        return "Required: " + (", ".join(enabled) if enabled else "none")


@dataclass
class OrderBlock:
    """Order Block - the zone candle (C2) preceding an impulsive move (C3)."""
    zone_type: ZoneType
    price: float         # Level to trade from (C2 low for bullish, C2 high for bearish)
    open: float
    high: float
    low: float
    close: float
    zone_start: float    # C2 open
    zone_end: float      # C2 low (bullish) or high (bearish)
    origin_index: int    # Index of the OB candle
    impulse_index: int   # Index of the impulsive candle
    mitigated: bool = False
    candle_time: Optional[int] = None  # Open time of the newest candle in the window

    @property
    def top(self) -> float:
        return max(self.zone_start, self.zone_end)

    @property
    def bottom(self) -> float:
        return min(self.zone_start, self.zone_end)

    @property
    def midpoint(self) -> float:
        """Optimal entry point (50% level)."""
        return (self.top + self.bottom) / 2
