"""Core: config, types, errors, logging."""

from spot_scanner.core.config import load_config, Config
from spot_scanner.core.errors import (
    SpotScannerError,
    ConfigError,
    InvalidFillError,
    ExchangeRejectedError,
    BracketSubmissionError,
)
from spot_scanner.core.types import (
    Candle,
    MarketSummary,
    SignalVerdict,
    FilledOrder,
    PrecisionRule,
    BracketPlan,
    RankingKey,
)
from spot_scanner.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "SpotScannerError",
    "ConfigError",
    "InvalidFillError",
    "ExchangeRejectedError",
    "BracketSubmissionError",
    "Candle",
    "MarketSummary",
    "SignalVerdict",
    "FilledOrder",
    "PrecisionRule",
    "BracketPlan",
    "RankingKey",
    "setup_logging",
]
