"""Signal detectors: base interface, strategies and the name registry."""

from spot_scanner.signals.base import SignalDetector
from spot_scanner.signals.spike import SpikeDetector
from spot_scanner.signals.trend import TrendDetector
from spot_scanner.signals.weighted_trend import WeightedTrendDetector
from spot_scanner.signals.registry import DETECTORS, build_detector_chain

__all__ = [
    "SignalDetector",
    "SpikeDetector",
    "TrendDetector",
    "WeightedTrendDetector",
    "DETECTORS",
    "build_detector_chain",
]
