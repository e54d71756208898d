import os
import sys

import pandas as pd
import pytest

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ob_scanner.models import InstrumentSnapshot

# (open, high, low, close, volume)
BULLISH_ROWS = [
    (98.0, 101.0, 97.0, 99.0, 500.0),     # C0 structure reference
    (97.0, 99.0, 94.0, 98.0, 500.0),      # C1 gap reference
    (100.0, 102.0, 90.0, 95.0, 1000.0),   # C2 bearish zone candle
    (100.5, 112.0, 100.0, 111.0, 800.0),  # C3 bullish impulse
    (111.0, 115.0, 108.0, 114.0, 600.0),  # C4 current candle
]

BEARISH_ROWS = [
    (102.0, 103.0, 99.0, 101.0, 500.0),
    (103.0, 106.0, 101.0, 102.0, 500.0),
    (100.0, 110.0, 98.0, 105.0, 1000.0),  # C2 bullish zone candle
    (99.5, 100.0, 88.0, 89.0, 800.0),     # C3 bearish impulse
    (89.0, 92.0, 85.0, 86.0, 600.0),
]


def frame_from_rows(rows, start_time=1_700_000_000_000, step=14_400_000):
    return pd.DataFrame(
        [
            {"time": start_time + n * step, "open": o, "high": h, "low": l, "close": c, "volume": v}
            for n, (o, h, l, c, v) in enumerate(rows)
        ]
    )


@pytest.fixture
def make_frame():
    return frame_from_rows


@pytest.fixture
def bullish_rows():
    return list(BULLISH_ROWS)


@pytest.fixture
def bearish_rows():
    return list(BEARISH_ROWS)


@pytest.fixture
def snapshot():
    return InstrumentSnapshot(id="BTCUSDT", name="BTC", current_price=105.0, volume="1.2B")
