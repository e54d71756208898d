import csv

from ob_scanner.models import DetectionResult, InstrumentSnapshot, ZoneType
from ob_scanner.utils.journal import HEADERS, ScanJournal

COIN = InstrumentSnapshot("BTCUSDT", "BTC", 105.0, "9.1B")


def test_journal_logs_detected_order_blocks(tmp_path):
    path = tmp_path / "order_blocks.csv"
    journal = ScanJournal(filename=str(path))

    detected = DetectionResult(
        instrument=COIN,
        zone_type=ZoneType.BULLISH,
        timeframe="4h",
        details="Potential 4H Order Block",
        zone_price=90.0,
        zone_range_start=100.0,
        zone_range_end=90.0,
        candle_time=1700057600000,
    )
    nothing = DetectionResult(instrument=COIN, zone_type=ZoneType.NONE, timeframe="4h", details="none")

    assert journal.log_result(detected)
    assert not journal.log_result(nothing)

    with open(path, newline='') as f:
        rows = list(csv.reader(f))

    assert rows[0] == HEADERS
    assert len(rows) == 2
    assert rows[1][1:8] == ["BTCUSDT", "BTC", "4h", "BullishOB", "90.0", "100.0", "90.0"]


def test_journal_keeps_existing_file(tmp_path):
    path = tmp_path / "order_blocks.csv"
    path.write_text("existing\n")

    ScanJournal(filename=str(path))

    assert path.read_text() == "existing\n"
