#!/usr/bin/env python3
"""
Spot Scanner CLI: scan | serve
Usage:
  python main.py scan [--once] [--config config.yaml]
  python main.py serve [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import sys
import threading
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spot_scanner.core.config import Config, load_config
from spot_scanner.core.errors import ConfigError
from spot_scanner.core.logger import setup_logging
from spot_scanner.execution.binance_spot import BinanceSpotClient
from spot_scanner.scanner.orchestrator import ScanOrchestrator
from spot_scanner.scanner.scheduler import run_scheduler
from spot_scanner.utils.telegram import TelegramNotifier

logger = logging.getLogger("spot_scanner")


def _setup(config_path: Path | None) -> Config | None:
    try:
        config = load_config(config_path, ROOT)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return None
    setup_logging(config.log_level, config.log_dir, config.log_file)
    return config


def _orchestrator(config: Config, client: BinanceSpotClient) -> ScanOrchestrator:
    notifier = TelegramNotifier(config.telegram_bot_token)
    return ScanOrchestrator(config, client, notifier)


def run_scan(config_path: Path | None, once: bool = False) -> int:
    """Run the scanner on its interval (or a single cycle)."""
    config = _setup(config_path)
    if config is None:
        return 2
    client = BinanceSpotClient(config.binance_api_key, config.binance_api_secret, testnet=config.use_testnet)
    orchestrator = _orchestrator(config, client)
    if once:
        orchestrator.run_cycle()
        return 0
    logger.info("Scheduling scanner every %.0fs", config.scan_interval_seconds)
    stop = threading.Event()
    try:
        run_scheduler(orchestrator, config.scan_interval_seconds, stop)
    except KeyboardInterrupt:
        logger.info("Shutdown by user")
        stop.set()
    return 0


def run_serve(config_path: Path | None) -> int:
    """Webhook server with the scanner running in a background thread."""
    import uvicorn
    from spot_scanner.execution.gateway import ExecutionGateway
    from spot_scanner.execution.webhook import create_app

    config = _setup(config_path)
    if config is None:
        return 2
    if not config.binance_api_key or not config.binance_api_secret:
        logger.error("Missing BINANCE_API_KEY or BINANCE_API_SECRET in .env")
        return 1
    if not config.webhook_token:
        logger.error("Missing EXECUTOR_WEBHOOK_TOKEN in .env")
        return 1
    client = BinanceSpotClient(config.binance_api_key, config.binance_api_secret, testnet=config.use_testnet)
    notifier = TelegramNotifier(config.telegram_bot_token)
    gateway = ExecutionGateway(config, client, notifier=notifier)

    stop = threading.Event()
    scanner = threading.Thread(
        target=run_scheduler,
        args=(ScanOrchestrator(config, client, notifier), config.scan_interval_seconds, stop),
        name="scanner",
        daemon=True,
    )
    scanner.start()
    try:
        uvicorn.run(create_app(gateway), host=config.webhook_host, port=config.webhook_port, log_config=None)
    finally:
        stop.set()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Spot signal scanner")
    parser.add_argument("mode", choices=["scan", "serve"], help="Run the scanner or the webhook server + scanner")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--once", action="store_true", help="scan: run a single cycle and exit")
    args = parser.parse_args()
    if args.mode == "scan":
        return run_scan(args.config, once=args.once)
    return run_serve(args.config)


if __name__ == "__main__":
    exit(main())
