"""
Volume + price spike on the most recent candle.
"""

from __future__ import annotations

import numpy as np

from spot_scanner.core.types import CandleSeries, SignalVerdict
from spot_scanner.signals.base import SignalDetector


class SpikeDetector(SignalDetector):
    """
    Signal when the last candle's volume is at least volume_spike_factor times
    the mean volume of the candles before it AND its body gained at least
    (price_spike_factor - 1) from open to close.
    """

    name = "SpikeVolumeAndPrice"

    def __init__(self, volume_spike_factor: float = 2.0, price_spike_factor: float = 1.01):
        self.volume_spike_factor = volume_spike_factor
        self.price_spike_factor = price_spike_factor

    def evaluate(self, candles: CandleSeries) -> SignalVerdict:
        if len(candles) < 2:
            return self.negative()
        last = candles[-1]
        prior_volumes = np.array([c.volume for c in candles[:-1]], dtype=float)
        avg_volume = float(prior_volumes.mean()) if len(prior_volumes) else 0.0
        if avg_volume == 0 or last.open == 0:
            return self.negative()

        volume_spike = last.volume / avg_volume
        price_change = (last.close - last.open) / last.open
        is_volume_spike = volume_spike >= self.volume_spike_factor
        is_price_spike = price_change >= (self.price_spike_factor - 1)
        is_signal = is_volume_spike and is_price_spike

        return SignalVerdict(
            is_signal=is_signal,
            detector_name=self.name,
            reason=(
                f"Volume Spike: x{volume_spike:.2f}, Price Change: {price_change * 100:.2f}%"
                if is_signal else None
            ),
            metadata={"volume_spike": volume_spike, "price_change": price_change},
        )
