"""
Recency-weighted trend over the tail of the series, with momentum confirmations.
"""

from __future__ import annotations

import numpy as np

from spot_scanner.core.types import CandleSeries, SignalVerdict
from spot_scanner.signals.base import SignalDetector
from spot_scanner.signals.trend import valid_closes

MIN_POINTS = 3


class WeightedTrendDetector(SignalDetector):
    """
    Weighted least squares on the last `window` normalized closes, weights
    alpha ** (n - 1 - i) so the newest candle weighs 1.
    Signal needs slope > min_slope, r2 > min_r2, last point on or above the
    fitted line, last close above the window SMA and above the previous close.
    """

    name = "UpsideTrendV2"

    def __init__(
        self,
        min_slope: float = 0.0005,
        min_r2: float = 0.5,
        window: int = 20,
        alpha: float = 0.6,
    ):
        if not 0 < alpha <= 1:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.min_slope = min_slope
        self.min_r2 = min_r2
        self.window = max(MIN_POINTS, window)
        self.alpha = alpha

    def evaluate(self, candles: CandleSeries) -> SignalVerdict:
        closes = valid_closes(candles[-self.window:])
        n = len(closes)
        if n < MIN_POINTS or closes[0] <= 0:
            return self.negative()

        y = closes / closes[0] - 1.0
        x = np.arange(n, dtype=float)
        w = self.alpha ** (n - 1 - x)

        sum_w = w.sum()
        sum_wx = (w * x).sum()
        sum_wy = (w * y).sum()
        sum_wxx = (w * x * x).sum()
        sum_wxy = (w * x * y).sum()
        denom = sum_w * sum_wxx - sum_wx * sum_wx
        if denom == 0:
            return self.negative()
        slope = float((sum_w * sum_wxy - sum_wx * sum_wy) / denom)
        intercept = float((sum_wy - slope * sum_wx) / sum_w)

        y_mean = sum_wy / sum_w
        y_pred = slope * x + intercept
        ss_res = float((w * (y - y_pred) ** 2).sum())
        ss_tot = float((w * (y - y_mean) ** 2).sum())
        r2 = 0.0 if ss_tot == 0 else 1.0 - ss_res / ss_tot

        last_close = float(closes[-1])
        prev_close = float(closes[-2])
        sma = float(closes.mean())
        last_above_fit = y[-1] >= y_pred[-1]

        is_signal = (
            ss_tot > 0
            and slope > self.min_slope
            and r2 > self.min_r2
            and last_above_fit
            and last_close > sma
            and last_close > prev_close
        )
        return SignalVerdict(
            is_signal=is_signal,
            detector_name=self.name,
            reason=(
                f"UpsideTrend: slope={slope * 100:.3f}%/candle r2={r2:.3f} lastAbovePred={last_above_fit}"
                if is_signal else None
            ),
            metadata={
                "slope": slope,
                "slope_pct_per_candle": slope * 100,
                "r2": r2,
                "n": float(n),
                "sma": sma,
                "last_close": last_close,
                "prev_close": prev_close,
                "min_slope": self.min_slope,
                "min_r2": self.min_r2,
            },
        )
