"""
Value objects passed between exchange, detectors, scanner and execution.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Sequence


class RankingKey(str, Enum):
    """Sort key for the market screener."""
    QUOTE_VOLUME = "quote_volume"
    PRICE_CHANGE = "price_change"


@dataclass(frozen=True)
class Candle:
    """OHLCV candle. Series are ordered oldest first."""
    timestamp_ms: int
    open: float
    high: float
    low: float
    close: float
    volume: float


CandleSeries = Sequence[Candle]


@dataclass(frozen=True)
class MarketSummary:
    """24h ticker summary for one BASE/QUOTE pair."""
    symbol: str
    quote_volume_24h: float
    price_change_percent: float

    @property
    def base(self) -> str:
        return self.symbol.split("/", 1)[0]

    @property
    def quote(self) -> str:
        parts = self.symbol.split("/", 1)
        return parts[1] if len(parts) == 2 else ""


@dataclass
class SignalVerdict:
    """Outcome of one detector on one candle series."""
    is_signal: bool
    detector_name: str
    reason: Optional[str] = None
    metadata: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class FilledOrder:
    """Result of a market buy: what was actually filled and at what average price."""
    symbol: str
    average_price: Optional[float]
    filled_quantity: Optional[float]
    order_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class PrecisionRule:
    """Exchange step sizes for one symbol. Used for formatting only."""
    symbol: str
    amount_step: Decimal
    price_step: Decimal


@dataclass(frozen=True)
class BracketPlan:
    """OCO sell bracket, every number pre-formatted to exchange precision."""
    symbol: str
    quantity: str
    take_profit_price: str
    stop_trigger_price: str
    stop_limit_price: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "takeProfitPrice": self.take_profit_price,
            "stopTriggerPrice": self.stop_trigger_price,
            "stopLimitPrice": self.stop_limit_price,
        }
