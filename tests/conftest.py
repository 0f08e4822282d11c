"""Shared fakes: an in-memory exchange and a recording notifier."""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from spot_scanner.core.config import Config
from spot_scanner.core.types import BracketPlan, Candle, FilledOrder, MarketSummary, PrecisionRule
from spot_scanner.execution.base import ExchangeClient
from spot_scanner.utils.telegram import Notifier


def make_candles(closes, volumes=None, opens=None) -> List[Candle]:
    volumes = volumes or [10.0] * len(closes)
    opens = opens or closes
    return [
        Candle(timestamp_ms=1_700_000_000_000 + i * 300_000, open=o, high=max(o, c), low=min(o, c), close=c, volume=v)
        for i, (o, c, v) in enumerate(zip(opens, closes, volumes))
    ]


class FakeExchange(ExchangeClient):
    def __init__(self, markets=None, candles: Optional[Dict[str, List[Candle]]] = None):
        self.markets = markets or []
        self.candles = candles or {}
        self.fetch_errors: Dict[str, Exception] = {}
        self.list_error: Optional[Exception] = None
        self.fill: Optional[FilledOrder] = None
        self.buy_error: Optional[Exception] = None
        self.bracket_error: Optional[Exception] = None
        self.precision = PrecisionRule("BTC/USDC", Decimal("0.00001"), Decimal("0.01"))
        self.fetch_calls: List[tuple] = []
        self.buys: List[tuple] = []
        self.brackets: List[BracketPlan] = []

    def list_markets(self):
        if self.list_error:
            raise self.list_error
        return list(self.markets)

    def fetch_candles(self, symbol, timeframe, count):
        self.fetch_calls.append((symbol, timeframe, count))
        if symbol in self.fetch_errors:
            raise self.fetch_errors[symbol]
        return list(self.candles.get(symbol, []))[-count:]

    def market_buy(self, symbol, notional):
        self.buys.append((symbol, notional))
        if self.buy_error:
            raise self.buy_error
        return self.fill or FilledOrder(symbol, 100.0, 0.5, order_id="1")

    def precision_for(self, symbol):
        return PrecisionRule(symbol, self.precision.amount_step, self.precision.price_step)

    def submit_bracket(self, plan):
        if self.bracket_error:
            raise self.bracket_error
        self.brackets.append(plan)
        return "42"


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False):
        self.sent: List[tuple] = []
        self.fail = fail

    def send(self, chat_target, text, action_url=None):
        if self.fail:
            raise RuntimeError("telegram down")
        self.sent.append((chat_target, text, action_url))
        return True


@pytest.fixture
def config():
    return Config(
        quote_currency="USDC",
        min_volume_24h=1_000_000,
        top_n_markets=5,
        candle_history_count=10,
        volume_spike_factor=2.0,
        price_spike_factor=1.01,
        webhook_token="s3cret",
        webhook_url="https://bot.example.com",
        telegram_chat_id="chat-1",
    )


@pytest.fixture
def exchange():
    return FakeExchange()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def market():
    return MarketSummary("BTC/USDC", 50_000_000.0, 2.5)
