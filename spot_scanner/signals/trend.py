"""
Sustained upward drift: least-squares line through normalized closes.

Closes are normalized to the fractional return from the first candle,
y_i = close_i / close_0 - 1, against x_i = i. The slope is therefore in
"fractional return per candle" and comparable across assets whatever their
nominal price.
"""

from __future__ import annotations
import math

import numpy as np

from spot_scanner.core.types import CandleSeries, SignalVerdict
from spot_scanner.signals.base import SignalDetector


def valid_closes(candles: CandleSeries) -> np.ndarray:
    """Close prices with None/NaN/inf dropped."""
    closes = [c.close for c in candles if c.close is not None and math.isfinite(c.close)]
    return np.array(closes, dtype=float)


class TrendDetector(SignalDetector):
    """Signal when slope > min_slope and r2 > min_r2."""

    name = "UpsideTrend"

    def __init__(self, min_slope: float = 0.0005, min_r2: float = 0.5):
        self.min_slope = min_slope
        self.min_r2 = min_r2

    def evaluate(self, candles: CandleSeries) -> SignalVerdict:
        closes = valid_closes(candles)
        n = len(closes)
        if n < 2 or closes[0] <= 0:
            return self.negative()

        y = closes / closes[0] - 1.0
        x = np.arange(n, dtype=float)
        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = (x * y).sum()
        sum_xx = (x * x).sum()

        denom = n * sum_xx - sum_x * sum_x
        if denom == 0:
            return self.negative()
        slope = float((n * sum_xy - sum_x * sum_y) / denom)
        intercept = float((sum_y - slope * sum_x) / n)

        y_mean = sum_y / n
        y_pred = slope * x + intercept
        ss_res = float(((y - y_pred) ** 2).sum())
        ss_tot = float(((y - y_mean) ** 2).sum())
        r2 = 0.0 if ss_tot == 0 else 1.0 - ss_res / ss_tot

        # A flat window has no trend to fit, whatever the thresholds
        is_signal = ss_tot > 0 and slope > self.min_slope and r2 > self.min_r2
        return SignalVerdict(
            is_signal=is_signal,
            detector_name=self.name,
            reason=f"Upside Trend Detected: Slope={slope:.6f}, R2={r2:.4f}" if is_signal else None,
            metadata={
                "slope": slope,
                "r2": r2,
                "min_slope": self.min_slope,
                "min_r2": self.min_r2,
            },
        )
