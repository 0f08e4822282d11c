"""Narrow the exchange's markets down to a bounded candidate set."""

from __future__ import annotations
import logging
from typing import Iterable, List

from spot_scanner.core.types import MarketSummary, RankingKey
from spot_scanner.execution.base import ExchangeClient

logger = logging.getLogger("spot_scanner.scanner.screener")

_SORT_KEYS = {
    RankingKey.QUOTE_VOLUME: lambda m: m.quote_volume_24h,
    RankingKey.PRICE_CHANGE: lambda m: m.price_change_percent,
}


def select(
    markets: Iterable[MarketSummary],
    quote_currency: str,
    min_volume: float,
    top_n: int,
    ranking_key: RankingKey,
) -> List[MarketSummary]:
    """
    Keep pairs quoted in quote_currency with 24h quote volume above min_volume,
    sort descending by ranking_key and return the first top_n.
    """
    quote = quote_currency.upper()
    eligible = [
        m for m in markets
        if m is not None and m.quote == quote and m.quote_volume_24h > min_volume
    ]
    eligible.sort(key=_SORT_KEYS[RankingKey(ranking_key)], reverse=True)
    return eligible[:max(top_n, 0)]


class MarketScreener:
    """Fetches 24h summaries from the exchange and applies select()."""

    def __init__(
        self,
        quote_currency: str,
        min_volume: float,
        top_n: int,
        ranking_key: RankingKey,
    ):
        self.quote_currency = quote_currency
        self.min_volume = min_volume
        self.top_n = top_n
        self.ranking_key = RankingKey(ranking_key)
        logger.info(
            "Screening %s pairs above %.0f 24h volume, top %d ranked by %s",
            self.quote_currency, self.min_volume, self.top_n, self.ranking_key.value,
        )

    def screen(self, exchange: ExchangeClient) -> List[MarketSummary]:
        """Candidates for this cycle. A failed ticker fetch means zero candidates."""
        try:
            markets = exchange.list_markets()
        except Exception as e:
            logger.exception("Error fetching tickers: %s", e)
            return []
        return select(markets, self.quote_currency, self.min_volume, self.top_n, self.ranking_key)
