"""Abstract exchange interface: market data and order placement."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

from spot_scanner.core.types import BracketPlan, Candle, FilledOrder, MarketSummary, PrecisionRule


class ExchangeClient(ABC):
    """Spot exchange: tickers, klines, market buy by notional, precision, OCO bracket."""

    @abstractmethod
    def list_markets(self) -> List[MarketSummary]:
        """24h summaries for every tradable pair. Symbols are BASE/QUOTE."""
        pass

    @abstractmethod
    def fetch_candles(self, symbol: str, timeframe: str, count: int) -> List[Candle]:
        """Up to `count` most recent candles, oldest first. Never padded."""
        pass

    @abstractmethod
    def market_buy(self, symbol: str, notional: float) -> FilledOrder:
        """Market buy spending `notional` of the quote currency. Raises ExchangeRejectedError."""
        pass

    @abstractmethod
    def precision_for(self, symbol: str) -> PrecisionRule:
        """Amount and price step sizes for symbol."""
        pass

    @abstractmethod
    def submit_bracket(self, plan: BracketPlan) -> str:
        """Submit the OCO sell as one request. Returns the exchange order-list id."""
        pass
