import threading
from http.server import HTTPServer
from unittest.mock import MagicMock

import pytest
import requests

from api import index
from ob_scanner.models import InstrumentSnapshot
from ob_scanner.scanner.scan_service import OrderBlockScanner


def test_parse_scan_params_defaults():
    interval, limit, config = index.parse_scan_params({})

    assert interval == "4h"
    assert limit == 100
    assert config.impulsive_min_body_ratio == 0.15
    assert config.impulsive_min_price_change == 0.0002
    assert config.significant_volume_factor == 0.5
    assert config.min_fvg_depth_ratio == 0.0
    assert config.require_bos and config.require_fvg
    assert config.require_c3_close_past_c2 and config.require_unmitigated


def test_parse_scan_params_overrides():
    interval, limit, config = index.parse_scan_params({
        "interval": ["1h"],
        "requireFVG": ["false"],
        "minFvgDepthRatio": ["0.2"],
        "limit": ["500"],
    })

    assert interval == "1h"
    assert limit == index.MAX_COIN_LIMIT
    assert config.require_fvg is False
    assert config.min_fvg_depth_ratio == 0.2


@pytest.mark.parametrize("query", [{"requireBOS": ["maybe"]}, {"volumeFactor": ["abc"]}, {"limit": ["1.5"]}])
def test_parse_scan_params_rejects_bad_values(query):
    with pytest.raises(ValueError):
        index.parse_scan_params(query)


@pytest.fixture
def server(monkeypatch, make_frame, bullish_rows):
    monkeypatch.setenv("SCANNER_API_KEY", "test-key")

    client = MagicMock()
    client.get_top_volume_coins.return_value = [InstrumentSnapshot("BTCUSDT", "BTC", 105.0, "9.1B")]
    client.fetch_klines.return_value = make_frame(bullish_rows)
    monkeypatch.setattr(index, "scanner", OrderBlockScanner(client))

    httpd = HTTPServer(("127.0.0.1", 0), index.handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


def test_requests_without_key_are_rejected(server):
    response = requests.get(f"{server}/api/results", timeout=5)

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized"}


def test_scan_then_results(server):
    headers = {"X-API-Key": "test-key"}

    assert requests.get(f"{server}/api/results", headers=headers, timeout=5).json() == []

    scan = requests.get(f"{server}/api/scan-order-blocks?interval=4h&minPriceChange=0.0005",
                        headers=headers, timeout=5)
    assert scan.status_code == 200
    body = scan.json()
    assert body[0]["id"] == "BTCUSDT"
    assert body[0]["zone_type"] == "BullishOB"
    assert body[0]["zone_price"] == 90.0

    cached = requests.get(f"{server}/api/results", headers=headers, timeout=5).json()
    assert [r["id"] for r in cached] == ["BTCUSDT"]


def test_bad_query_returns_400(server):
    response = requests.get(f"{server}/api/scan-order-blocks?requireBOS=maybe",
                            headers={"X-API-Key": "test-key"}, timeout=5)

    assert response.status_code == 400
