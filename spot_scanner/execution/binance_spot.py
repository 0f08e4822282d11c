"""
Binance spot client with retry and rate-limit handling.
"""

from __future__ import annotations
import logging
import time
from typing import Dict, List, Optional

import pandas as pd

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceOrderException

from spot_scanner.core.errors import ExchangeRejectedError
from spot_scanner.core.types import BracketPlan, Candle, FilledOrder, MarketSummary, PrecisionRule
from spot_scanner.execution.base import ExchangeClient
from spot_scanner.utils.exchange_filters import parse_symbol_filters

logger = logging.getLogger("spot_scanner.execution.binance")

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit)."""
    def decorator(f):
        def wrapped(*args, **kwargs):
            last_exc = None
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    last_exc = e
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
            raise last_exc
        return wrapped
    return decorator


def market_id(symbol: str) -> str:
    """'BTC/USDC' -> 'BTCUSDC'."""
    return symbol.replace("/", "").upper()


def klines_to_candles(raw: list) -> List[Candle]:
    """Binance kline rows -> Candle list, oldest first."""
    if not raw:
        return []
    df = pd.DataFrame(raw, columns=KLINE_COLUMNS)
    df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
    df["open_time"] = df["open_time"].astype("int64")
    df = df.drop_duplicates(subset="open_time").sort_values("open_time")
    return [
        Candle(
            timestamp_ms=int(row.open_time),
            open=row.open,
            high=row.high,
            low=row.low,
            close=row.close,
            volume=row.volume,
        )
        for row in df.itertuples(index=False)
    ]


def filled_order_from_response(symbol: str, res: dict) -> FilledOrder:
    """
    Average price = cumulative quote spent / executed quantity.
    Commission charged in the base asset is taken off the filled quantity.
    """
    executed = float(res.get("executedQty") or 0)
    quote_spent = float(res.get("cummulativeQuoteQty") or 0)
    fills = res.get("fills") or []
    if executed <= 0 and fills:
        executed = sum(float(f["qty"]) for f in fills)
        quote_spent = sum(float(f["qty"]) * float(f["price"]) for f in fills)
    avg = quote_spent / executed if executed > 0 else None
    base_asset = symbol.split("/")[0].upper()
    base_fee = sum(
        float(f.get("commission") or 0)
        for f in fills
        if str(f.get("commissionAsset", "")).upper() == base_asset
    )
    held = executed - base_fee
    if base_fee:
        logger.info("%s: %.8f %s paid as commission, holding %.8f", symbol, base_fee, base_asset, held)
    return FilledOrder(
        symbol=symbol,
        average_price=avg,
        filled_quantity=held if held > 0 else None,
        order_id=str(res.get("orderId")) if res.get("orderId") is not None else None,
        raw=res,
    )


class BinanceSpotClient(ExchangeClient):
    """Binance spot client (testnet and live)."""

    def __init__(self, api_key: str, api_secret: str, testnet: bool = False):
        self._client = Client(api_key, api_secret, testnet=testnet)
        logger.info("Binance spot: using %s", "TESTNET" if testnet else "LIVE")
        self._symbols: Optional[Dict[str, dict]] = None

    @retry_on_rate_limit(max_retries=2)
    def _exchange_symbols(self, refresh: bool = False) -> Dict[str, dict]:
        if self._symbols is None or refresh:
            info = self._client.get_exchange_info()
            self._symbols = {s["symbol"]: s for s in info.get("symbols", [])}
        return self._symbols

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def list_markets(self) -> List[MarketSummary]:
        symbols = self._exchange_symbols(refresh=True)
        markets = []
        for t in self._client.get_ticker():
            s = symbols.get(t.get("symbol"))
            if not s or s.get("status") != "TRADING":
                continue
            markets.append(MarketSummary(
                symbol=f"{s['baseAsset']}/{s['quoteAsset']}",
                quote_volume_24h=float(t.get("quoteVolume") or 0),
                price_change_percent=float(t.get("priceChangePercent") or 0),
            ))
        return markets

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def fetch_candles(self, symbol: str, timeframe: str, count: int) -> List[Candle]:
        raw = self._client.get_klines(symbol=market_id(symbol), interval=timeframe, limit=count)
        return klines_to_candles(raw)

    def precision_for(self, symbol: str) -> PrecisionRule:
        info = self._exchange_symbols().get(market_id(symbol))
        if info is None:
            info = self._exchange_symbols(refresh=True).get(market_id(symbol))
        if info is None:
            logger.warning("Symbol info not found for %s; using default precision", symbol)
        return parse_symbol_filters(symbol, info)

    def market_buy(self, symbol: str, notional: float) -> FilledOrder:
        try:
            res = self._client.order_market_buy(symbol=market_id(symbol), quoteOrderQty=f"{notional:f}")
        except (BinanceAPIException, BinanceOrderException) as e:
            logger.error("Market buy rejected for %s: %s", symbol, e)
            raise ExchangeRejectedError(str(e)) from e
        filled = filled_order_from_response(symbol, res)
        logger.info("Market buy %s filled qty=%s avg=%s", symbol, filled.filled_quantity, filled.average_price)
        return filled

    def submit_bracket(self, plan: BracketPlan) -> str:
        # orderList/oco: above leg takes profit, below leg is the stop-limit
        try:
            res = self._client.order_oco_sell(
                symbol=market_id(plan.symbol),
                quantity=plan.quantity,
                aboveType="LIMIT_MAKER",
                abovePrice=plan.take_profit_price,
                belowType="STOP_LOSS_LIMIT",
                belowStopPrice=plan.stop_trigger_price,
                belowPrice=plan.stop_limit_price,
                belowTimeInForce="GTC",
            )
        except (BinanceAPIException, BinanceOrderException) as e:
            logger.error("OCO rejected for %s: %s", plan.symbol, e)
            raise ExchangeRejectedError(str(e)) from e
        return str(res.get("orderListId"))
