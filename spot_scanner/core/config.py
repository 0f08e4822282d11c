"""
Load configuration from config.yaml and .env. Secrets only from env.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml
from dotenv import load_dotenv

from spot_scanner.core.errors import ConfigError
from spot_scanner.core.types import RankingKey
from spot_scanner.utils.timeframes import timeframe_minutes


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def _split_names(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value or [])
    return tuple(str(s).strip() for s in items if str(s).strip())


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns an immutable Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: Any = "") -> str:
        return os.getenv(key, str(default)).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        raw = os.getenv(key)
        if raw is None:
            return int(default)
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key} must be an integer, got {raw!r}")

    def env_float(key: str, default: float = 0.0) -> float:
        raw = os.getenv(key)
        if raw is None:
            return float(default)
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"{key} must be a number, got {raw!r}")

    api = data.get("api", {}) or {}
    scanner = data.get("scanner", {}) or {}
    signals = data.get("signals", {}) or {}
    execution = data.get("execution", {}) or {}
    webhook = data.get("webhook", {}) or {}
    telegram = data.get("telegram", {}) or {}
    logging_cfg = data.get("logging", {}) or {}

    use_testnet = env_bool("USE_TESTNET", api.get("use_testnet", False))
    # Dedicated testnet/mainnet keys win so both can live in .env
    if use_testnet:
        binance_api_key = env("BINANCE_TESTNET_API_KEY") or env("BINANCE_API_KEY")
        binance_api_secret = env("BINANCE_TESTNET_API_SECRET") or env("BINANCE_API_SECRET")
    else:
        binance_api_key = env("BINANCE_MAINNET_API_KEY") or env("BINANCE_API_KEY")
        binance_api_secret = env("BINANCE_MAINNET_API_SECRET") or env("BINANCE_API_SECRET")

    ranking_raw = env("RANKING_KEY", scanner.get("ranking_key", RankingKey.QUOTE_VOLUME.value)).lower()
    try:
        ranking_key = RankingKey(ranking_raw)
    except ValueError:
        choices = ", ".join(k.value for k in RankingKey)
        raise ConfigError(f"RANKING_KEY must be one of: {choices} (got {ranking_raw!r})")

    timeframe = env("CANDLE_TIMEFRAME", scanner.get("candle_timeframe", "5m"))
    try:
        timeframe_minutes(timeframe)
    except ValueError as e:
        raise ConfigError(str(e))

    active_raw = os.getenv("ACTIVE_SIGNALS")
    active_signals = _split_names(active_raw if active_raw is not None
                                  else signals.get("active", ["SpikeVolumeAndPrice"]))

    return Config(
        binance_api_key=binance_api_key,
        binance_api_secret=binance_api_secret,
        use_testnet=use_testnet,
        # Scanner
        quote_currency=env("QUOTE_CURRENCY", scanner.get("quote_currency", "USDC")).upper(),
        min_volume_24h=env_float("MIN_VOLUME_24H", scanner.get("min_volume_24h", 10_000_000)),
        top_n_markets=env_int("TOP_N_MARKETS", scanner.get("top_n_markets", 20)),
        ranking_key=ranking_key,
        candle_timeframe=timeframe,
        candle_history_count=env_int("CANDLE_HISTORY_COUNT", scanner.get("candle_history_count", 100)),
        scan_interval_seconds=env_float("SCAN_INTERVAL_SECONDS", scanner.get("interval_seconds", 60)),
        # Signals
        active_signals=active_signals,
        volume_spike_factor=env_float("VOLUME_SPIKE_FACTOR", signals.get("volume_spike_factor", 2.0)),
        price_spike_factor=env_float("PRICE_SPIKE_FACTOR", signals.get("price_spike_factor", 1.01)),
        trend_min_slope=env_float("UPSIDE_TREND_MIN_SLOPE", signals.get("trend_min_slope", 0.0005)),
        trend_min_r2=env_float("UPSIDE_TREND_MIN_R2", signals.get("trend_min_r2", 0.5)),
        trend_v2_window=env_int("UPSIDE_TREND_V2_WINDOW", signals.get("trend_v2_window", 20)),
        trend_v2_alpha=env_float("UPSIDE_TREND_V2_ALPHA", signals.get("trend_v2_alpha", 0.6)),
        # Execution
        order_amount=env_float("ORDER_AMOUNT", execution.get("order_amount", 50.0)),
        take_profit_factor=env_float("TAKE_PROFIT_FACTOR", execution.get("take_profit_factor", 1.025)),
        stop_loss_factor=env_float("STOP_LOSS_FACTOR", execution.get("stop_loss_factor", 0.9875)),
        # Webhook (token from env only)
        webhook_token=env("EXECUTOR_WEBHOOK_TOKEN"),
        webhook_url=env("EXECUTOR_WEBHOOK_URL", webhook.get("public_url", "http://localhost:3000")).rstrip("/"),
        webhook_host=env("HOST", webhook.get("host", "0.0.0.0")),
        webhook_port=env_int("PORT", webhook.get("port", 3000)),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", telegram.get("chat_id", "")),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "spot_scanner.log"),
    )


@dataclass(frozen=True)
class Config:
    """Unified configuration, passed explicitly to every component."""

    binance_api_key: str = field(default="", repr=False)
    binance_api_secret: str = field(default="", repr=False)
    use_testnet: bool = False

    quote_currency: str = "USDC"
    min_volume_24h: float = 10_000_000.0
    top_n_markets: int = 20
    ranking_key: RankingKey = RankingKey.QUOTE_VOLUME
    candle_timeframe: str = "5m"
    candle_history_count: int = 100
    scan_interval_seconds: float = 60.0

    active_signals: Tuple[str, ...] = ("SpikeVolumeAndPrice",)
    volume_spike_factor: float = 2.0
    price_spike_factor: float = 1.01
    trend_min_slope: float = 0.0005
    trend_min_r2: float = 0.5
    trend_v2_window: int = 20
    trend_v2_alpha: float = 0.6

    order_amount: float = 50.0
    take_profit_factor: float = 1.025
    stop_loss_factor: float = 0.9875

    webhook_token: str = field(default="", repr=False)
    webhook_url: str = "http://localhost:3000"
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 3000

    telegram_bot_token: str = field(default="", repr=False)
    telegram_chat_id: str = ""

    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_file: str = "spot_scanner.log"
