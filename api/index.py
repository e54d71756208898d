from http.server import BaseHTTPRequestHandler
from urllib.parse import urlparse, parse_qs
import json
import logging
import os

from ob_scanner.data.binance_loader import BinanceFuturesClient
from ob_scanner.scanner.scan_service import OrderBlockScanner
from ob_scanner.strategies.smc_detector import DetectorConfig
from ob_scanner.utils.config_loader import DEFAULT_FUTURES_BASE_URL

logger = logging.getLogger("OBScanner.API")

# Shared scanner so /api/results serves whatever the last scan cached
scanner = None

# Defaults for on-demand scans from the frontend
ENDPOINT_DEFAULTS = {
    "interval": "4h",
    "minBodyRatio": 0.15,
    "minPriceChange": 0.0002,
    "volumeFactor": 0.5,
    "requireBOS": True,
    "requireC3ClosePastC2": True,
    "requireFVG": True,
    "requireUnmitigated": True,
    "minFvgDepthRatio": 0.0,
    "limit": 100,
}

MAX_COIN_LIMIT = 100


def get_scanner():
    global scanner
    if scanner is None:
        base_url = os.environ.get("BINANCE_FUTURES_BASE_URL", DEFAULT_FUTURES_BASE_URL)
        scanner = OrderBlockScanner(BinanceFuturesClient(base_url))
    return scanner


def _parse_bool(value: str) -> bool:
    value = value.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise ValueError(f"Invalid boolean: {value}")


def parse_scan_params(query: dict):
    """
    Turns query parameters into (interval, limit, DetectorConfig).
    Raises ValueError on malformed values.
    """
    def param(name):
        values = query.get(name)
        return values[0] if values else None

    def number(name, cast=float):
        raw = param(name)
        return ENDPOINT_DEFAULTS[name] if raw is None else cast(raw)

    def flag(name):
        raw = param(name)
        return ENDPOINT_DEFAULTS[name] if raw is None else _parse_bool(raw)

    interval = param("interval") or ENDPOINT_DEFAULTS["interval"]
    limit = min(max(number("limit", int), 1), MAX_COIN_LIMIT)

    config = DetectorConfig(
        impulsive_min_body_ratio=number("minBodyRatio"),
        impulsive_min_price_change=number("minPriceChange"),
        significant_volume_factor=number("volumeFactor"),
        require_bos=flag("requireBOS"),
        require_c3_close_past_c2=flag("requireC3ClosePastC2"),
        require_fvg=flag("requireFVG"),
        require_unmitigated=flag("requireUnmitigated"),
        min_fvg_depth_ratio=number("minFvgDepthRatio"),
    )
    return interval, limit, config


class handler(BaseHTTPRequestHandler):
    def _send_json(self, status: int, payload):
        self.send_response(status)
        self.send_header('Content-type', 'application/json')
        self.send_header('Access-Control-Allow-Origin', '*')
        self.end_headers()
        self.wfile.write(json.dumps(payload).encode('utf-8'))

    def _authorized(self) -> bool:
        api_key = self.headers.get('X-API-Key')
        env_key = os.environ.get('SCANNER_API_KEY')
        return bool(env_key) and api_key == env_key

    def do_GET(self):
        if not self._authorized():
            self._send_json(403, {"error": "Unauthorized"})
            return

        url = urlparse(self.path)

        if url.path == "/api/results":
            results = get_scanner().latest_results()
            self._send_json(200, [r.to_dict() for r in results.values()])
            return

        if url.path == "/api/scan-order-blocks":
            try:
                interval, limit, config = parse_scan_params(parse_qs(url.query))
            except ValueError as e:
                self._send_json(400, {"error": str(e)})
                return

            results = get_scanner().scan(interval, config, coin_limit=limit)
            self._send_json(200, [r.to_dict() for r in results])
            return

        self._send_json(404, {"error": "Not found"})

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', 'GET, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'X-API-Key, Content-Type')
        self.end_headers()

    def log_message(self, format, *args):
        logger.debug(format % args)
