"""Detector names as they appear in ACTIVE_SIGNALS, mapped to factories."""

from __future__ import annotations
import logging
from typing import Callable, Dict, List

from spot_scanner.core.config import Config
from spot_scanner.signals.base import SignalDetector
from spot_scanner.signals.spike import SpikeDetector
from spot_scanner.signals.trend import TrendDetector
from spot_scanner.signals.weighted_trend import WeightedTrendDetector

logger = logging.getLogger("spot_scanner.signals")

DETECTORS: Dict[str, Callable[[Config], SignalDetector]] = {
    SpikeDetector.name: lambda c: SpikeDetector(
        volume_spike_factor=c.volume_spike_factor,
        price_spike_factor=c.price_spike_factor,
    ),
    TrendDetector.name: lambda c: TrendDetector(
        min_slope=c.trend_min_slope,
        min_r2=c.trend_min_r2,
    ),
    WeightedTrendDetector.name: lambda c: WeightedTrendDetector(
        min_slope=c.trend_min_slope,
        min_r2=c.trend_min_r2,
        window=c.trend_v2_window,
        alpha=c.trend_v2_alpha,
    ),
}


def build_detector_chain(config: Config) -> List[SignalDetector]:
    """Detectors in configured order. Unknown names are skipped with a warning."""
    chain: List[SignalDetector] = []
    for name in config.active_signals:
        factory = DETECTORS.get(name)
        if factory is None:
            logger.warning("Unknown signal detector %r in active list, skipping (known: %s)",
                           name, ", ".join(DETECTORS))
            continue
        chain.append(factory(config))
    return chain
