import time
import json
import argparse
from ob_scanner.utils.logger import setup_logger
from ob_scanner.utils.config_loader import load_config, load_credentials
from ob_scanner.utils.journal import ScanJournal
from ob_scanner.data.binance_loader import BinanceFuturesClient
from ob_scanner.scanner.scan_service import OrderBlockScanner
from ob_scanner.strategies.smc_detector import DetectorConfig


def export_results(scanner, filename, logger):
    """Writes the latest result per instrument to a JSON file."""
    payload = {
        "last_updated": time.strftime("%Y-%m-%d %H:%M:%S"),
        "results": [r.to_dict() for r in scanner.latest_results().values()],
    }
    try:
        with open(filename, "w") as f:
            json.dump(payload, f, indent=4)
    except OSError as e:
        logger.error(f"Results Export Failed: {e}")


def main():
    parser = argparse.ArgumentParser(description="Order Block Scanner")
    parser.add_argument("--config", type=str, default="config.yaml", help="Path to config file")
    parser.add_argument("--env", type=str, default=".env", help="Path to .env file")
    parser.add_argument("--once", action="store_true", help="Run a single scan and exit")
    args = parser.parse_args()

    config = load_config(args.config)
    system = config.get('system', {})
    logger = setup_logger(
        log_level=system.get('log_level', 'INFO'),
        log_file=system.get('log_file'),
        child_levels=system.get('logger_levels'),
    )
    logger.info(f"Starting Order Block Scanner with config: {args.config} and env: {args.env}")

    creds = load_credentials(args.env)

    scan_cfg = config.get('scanner', {})
    detector_config = DetectorConfig.from_dict(config.get('detector'))
    timeframe = scan_cfg.get('timeframe', '4h')
    interval_seconds = float(scan_cfg.get('scan_interval_hours', 4)) * 3600
    results_file = scan_cfg.get('results_file', 'scan_results.json')

    journal = None
    journal_cfg = config.get('journal', {})
    if journal_cfg.get('enabled', False):
        journal = ScanJournal(journal_cfg.get('filename', 'order_blocks.csv'))

    client = BinanceFuturesClient(creds['futures_base_url'])
    scanner = OrderBlockScanner(client, journal=journal, max_workers=scan_cfg.get('max_workers', 1))

    logger.info(f"Scanner Initialized. {detector_config.describe()}")

    try:
        while True:
            started = time.time()
            scanner.scan(
                timeframe,
                detector_config,
                coin_limit=scan_cfg.get('coin_limit', 100),
                kline_limit=scan_cfg.get('kline_limit', 200),
            )
            export_results(scanner, results_file, logger)

            if args.once:
                break

            elapsed = time.time() - started
            logger.info(f"Next scan in {max(interval_seconds - elapsed, 0) / 60:.0f} minutes")
            time.sleep(max(interval_seconds - elapsed, 0))

    except KeyboardInterrupt:
        logger.info("Scanner stopping...")

if __name__ == "__main__":
    main()
