"""Unit tests for scanner.orchestrator and scanner.scheduler."""

from dataclasses import replace
from urllib.parse import parse_qs, urlsplit

from spot_scanner.core.types import MarketSummary, SignalVerdict
from spot_scanner.scanner.orchestrator import ScanOrchestrator
from spot_scanner.scanner.scheduler import run_scheduler
from spot_scanner.signals.base import SignalDetector
from conftest import RecordingNotifier, make_candles


class StubDetector(SignalDetector):
    def __init__(self, name, fires):
        self.name = name
        self.fires = fires
        self.calls = 0

    def evaluate(self, candles):
        self.calls += 1
        if self.fires:
            return SignalVerdict(True, self.name, reason=f"{self.name} fired", metadata={"x": 1.0})
        return self.negative(x=0.0)


def spike_candles():
    return make_candles(closes=[100.0] * 9 + [102.0], volumes=[10.0] * 9 + [30.0], opens=[100.0] * 10)


def test_first_match_wins(config, exchange, notifier, market):
    exchange.markets = [market]
    exchange.candles = {market.symbol: make_candles([1.0] * 10)}
    a, b = StubDetector("A", True), StubDetector("B", True)
    report = ScanOrchestrator(config, exchange, notifier, detectors=[a, b]).run_cycle()
    assert a.calls == 1
    assert b.calls == 0
    assert [(s, v.detector_name) for s, v in report.signals] == [("BTC/USDC", "A")]
    assert len(notifier.sent) == 1


def test_falls_through_to_second_detector(config, exchange, notifier, market):
    exchange.markets = [market]
    exchange.candles = {market.symbol: make_candles([1.0] * 10)}
    a, b = StubDetector("A", False), StubDetector("B", True)
    report = ScanOrchestrator(config, exchange, notifier, detectors=[a, b]).run_cycle()
    assert (a.calls, b.calls) == (1, 1)
    assert report.signals[0][1].detector_name == "B"


def test_spike_notification_with_action_link(config, exchange, notifier, market):
    exchange.markets = [market]
    exchange.candles = {market.symbol: spike_candles()}
    ScanOrchestrator(config, exchange, notifier).run_cycle()
    assert exchange.fetch_calls == [("BTC/USDC", "5m", 10)]
    chat, text, url = notifier.sent[0]
    assert chat == "chat-1"
    assert "BTC/USDC" in text and "SpikeVolumeAndPrice" in text
    assert "https://www.binance.com/en/trade/BTC_USDC" in text
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://bot.example.com/s3cret"
    assert parse_qs(parts.query) == {"action": ["BUY_BTC/USDC"], "symbol": ["BTC/USDC"]}


def test_short_history_is_skipped(config, exchange, notifier, market):
    exchange.markets = [market]
    exchange.candles = {market.symbol: spike_candles()[:9]}
    det = StubDetector("A", True)
    report = ScanOrchestrator(config, exchange, notifier, detectors=[det]).run_cycle()
    assert det.calls == 0
    assert report.skipped == 1
    assert notifier.sent == []


def test_market_failure_does_not_abort_cycle(config, exchange, notifier):
    bad = MarketSummary("BAD/USDC", 90e6, 1.0)
    good = MarketSummary("GOOD/USDC", 80e6, 1.0)
    exchange.markets = [bad, good]
    exchange.candles = {"GOOD/USDC": spike_candles()}
    exchange.fetch_errors = {"BAD/USDC": TimeoutError("slow")}
    report = ScanOrchestrator(config, exchange, notifier).run_cycle()
    assert report.failed == 1
    assert [s for s, _ in report.signals] == ["GOOD/USDC"]


def test_notifier_failure_is_contained(config, exchange, market):
    exchange.markets = [market, MarketSummary("ETH/USDC", 40e6, 1.0)]
    exchange.candles = {market.symbol: spike_candles(), "ETH/USDC": spike_candles()}
    report = ScanOrchestrator(config, exchange, RecordingNotifier(fail=True)).run_cycle()
    assert len(report.signals) == 2
    assert report.failed == 0


def test_empty_chain_is_noop(config, exchange, notifier, market):
    exchange.markets = [market]
    cfg = replace(config, active_signals=("NoSuchSignal",))
    report = ScanOrchestrator(cfg, exchange, notifier).run_cycle()
    assert report.candidates == 0
    assert exchange.fetch_calls == []


def test_scheduler_runs_eagerly_and_stops(config, exchange, notifier):
    orch = ScanOrchestrator(config, exchange, notifier)
    assert run_scheduler(orch, interval_seconds=0.01, max_cycles=3) == 3


def test_scheduler_survives_cycle_errors(config, exchange, notifier):
    class Boom(ScanOrchestrator):
        def run_cycle(self):
            raise RuntimeError("cycle failed")

    assert run_scheduler(Boom(config, exchange, notifier), interval_seconds=0.01, max_cycles=2) == 2
