"""
One scan cycle: screen markets, fetch candles, run the detector chain,
notify the operator on the first positive verdict per market.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlencode

from spot_scanner.core.config import Config
from spot_scanner.core.types import MarketSummary, SignalVerdict
from spot_scanner.execution.base import ExchangeClient
from spot_scanner.execution.gateway import BUY_ACTION_PREFIX
from spot_scanner.scanner.screener import MarketScreener
from spot_scanner.signals.base import SignalDetector
from spot_scanner.signals.registry import build_detector_chain
from spot_scanner.utils.telegram import Notifier

logger = logging.getLogger("spot_scanner.scanner")


@dataclass
class CycleReport:
    """What happened in one cycle."""
    candidates: int = 0
    scanned: int = 0
    skipped: int = 0
    failed: int = 0
    signals: List[Tuple[str, SignalVerdict]] = field(default_factory=list)


def trade_link(market: MarketSummary) -> str:
    return f"https://www.binance.com/en/trade/{market.base}_{market.quote}"


def action_url(config: Config, symbol: str) -> str:
    query = urlencode({"action": f"{BUY_ACTION_PREFIX}{symbol}", "symbol": symbol})
    return f"{config.webhook_url}/{config.webhook_token}?{query}"


def format_signal_message(market: MarketSummary, verdict: SignalVerdict) -> str:
    return (
        "🚨 BUY SIGNAL DETECTED 🚨\n\n"
        f"Market: {market.symbol}\n"
        f"Signal: {verdict.detector_name}\n"
        f"{verdict.reason}\n\n"
        f"View on Binance: {trade_link(market)}"
    )


class ScanOrchestrator:
    """
    Runs cycles against an exchange and a notifier. If `detectors` is None the
    chain is rebuilt from config.active_signals on every cycle.
    """

    def __init__(
        self,
        config: Config,
        exchange: ExchangeClient,
        notifier: Notifier,
        detectors: Optional[Sequence[SignalDetector]] = None,
        screener: Optional[MarketScreener] = None,
    ):
        self.config = config
        self.exchange = exchange
        self.notifier = notifier
        self._detectors = list(detectors) if detectors is not None else None
        self.screener = screener or MarketScreener(
            quote_currency=config.quote_currency,
            min_volume=config.min_volume_24h,
            top_n=config.top_n_markets,
            ranking_key=config.ranking_key,
        )

    def detector_chain(self) -> List[SignalDetector]:
        if self._detectors is not None:
            return list(self._detectors)
        return build_detector_chain(self.config)

    def run_cycle(self) -> CycleReport:
        report = CycleReport()
        chain = self.detector_chain()
        if not chain:
            logger.warning("No active signal detectors configured, nothing to scan")
            return report

        markets = self.screener.screen(self.exchange)
        report.candidates = len(markets)
        logger.info("Found %d top markets to analyze (signals: %s)",
                    len(markets), ", ".join(d.name for d in chain))

        for market in markets:
            try:
                verdict = self.analyze_market(market, chain)
            except Exception as e:
                report.failed += 1
                logger.exception("Error analyzing %s: %s", market.symbol, e)
                continue
            if verdict is None:
                report.skipped += 1
                continue
            report.scanned += 1
            if verdict.is_signal:
                report.signals.append((market.symbol, verdict))
                self.dispatch(market, verdict)

        logger.info("Scan finished: %d candidates, %d scanned, %d skipped, %d failed, %d signals",
                    report.candidates, report.scanned, report.skipped, report.failed, len(report.signals))
        return report

    def analyze_market(self, market: MarketSummary, chain: Sequence[SignalDetector]) -> Optional[SignalVerdict]:
        """
        First positive verdict in chain order, else the last negative one.
        None when the market has too little history this cycle.
        """
        count = self.config.candle_history_count
        candles = self.exchange.fetch_candles(market.symbol, self.config.candle_timeframe, count)
        if len(candles) < count:
            logger.info("Not enough OHLCV data for %s (%d/%d). Skipping.", market.symbol, len(candles), count)
            return None

        verdict = None
        for detector in chain:
            verdict = detector.evaluate(candles)
            logger.debug("%s %s -> %s %s", market.symbol, detector.name, verdict.is_signal, verdict.metadata)
            if verdict.is_signal:
                logger.info("SIGNAL DETECTED for %s by %s: %s", market.symbol, detector.name, verdict.reason)
                break
        return verdict

    def dispatch(self, market: MarketSummary, verdict: SignalVerdict) -> None:
        text = format_signal_message(market, verdict)
        try:
            sent = self.notifier.send(self.config.telegram_chat_id, text, action_url(self.config, market.symbol))
        except Exception as e:
            logger.exception("Error sending notification for %s: %s", market.symbol, e)
            return
        if sent:
            logger.info("Signal for %s sent to Telegram.", market.symbol)
        else:
            logger.warning("Signal for %s was not delivered.", market.symbol)
