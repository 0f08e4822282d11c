"""Abstract signal detector: candle series in, verdict out."""

from __future__ import annotations
from abc import ABC, abstractmethod

from spot_scanner.core.types import CandleSeries, SignalVerdict


class SignalDetector(ABC):
    """Pure function of a candle series. No I/O, no state between calls."""

    name: str = ""

    @abstractmethod
    def evaluate(self, candles: CandleSeries) -> SignalVerdict:
        """Return a verdict for the most recent candle of the series (oldest first)."""
        pass

    def negative(self, **metadata: float) -> SignalVerdict:
        return SignalVerdict(is_signal=False, detector_name=self.name, metadata=dict(metadata))
