"""
Rolling Redemption Value-at-Risk
================================

Empirical VaR over a bounded window of observed daily redemptions:
1. Rolling window (FIFO eviction beyond capacity)
2. Horizon-scaled empirical quantile (VaR)
3. Tail mean above the quantile (Expected Shortfall)
4. Normal-approximation VaR for comparison

Multi-day risk is the single-day quantile times the horizon (linear
scaling, not square-root-of-time or compounded variance).
"""

import logging
import math
from collections import deque
from typing import Iterable, Tuple

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 100
DEFAULT_MIN_SAMPLES = 30
FALLBACK_MULTIPLIER = 2.0


class RiskEstimator:
    """
    Rolling window of daily redemption amounts with quantile risk estimates.

    With fewer than ``min_samples`` observations every estimate falls back to
    ``mean * horizon * 2`` (conservative, non-fatal).
    """

    def __init__(self, confidence: float = 0.95,
                 window_size: int = DEFAULT_WINDOW,
                 min_samples: int = DEFAULT_MIN_SAMPLES):
        if not 0.0 < confidence < 1.0:
            raise ValueError(f"confidence must lie in (0, 1), got {confidence}")
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self.confidence = confidence
        self.window_size = window_size
        self.min_samples = min_samples
        self._history = deque(maxlen=window_size)

    def __len__(self) -> int:
        return len(self._history)

    @property
    def window(self) -> Tuple[float, ...]:
        """Current window contents, oldest first"""
        return tuple(self._history)

    def add_observation(self, amount: float) -> None:
        """Append one day of demand; the oldest entry drops out past capacity."""
        self._history.append(float(amount))

    def extend(self, amounts: Iterable[float]) -> None:
        for amount in amounts:
            self.add_observation(amount)

    def average(self) -> float:
        if not self._history:
            return 0.0
        return float(np.mean(self._history))

    def _is_degenerate(self) -> bool:
        # an empty window has no quantile, whatever min_samples says
        return not self._history or len(self._history) < self.min_samples

    def _fallback(self, horizon_days: float) -> float:
        logger.debug("only %d observations (< %d), using %.0fx mean fallback",
                     len(self._history), self.min_samples, FALLBACK_MULTIPLIER)
        return self.average() * horizon_days * FALLBACK_MULTIPLIER

    def _quantile_index(self, n: int, confidence: float) -> int:
        return max(0, math.ceil(n * confidence) - 1)

    def estimate(self, horizon_days: float = 7,
                 confidence: float = None) -> float:
        """
        VaR of cumulative redemptions over ``horizon_days``.

        VaR = sorted(window)[ceil(n·c) - 1] · horizon

        Args:
            horizon_days: Risk horizon (days)
            confidence: Quantile level (defaults to the estimator's level)

        Returns:
            Horizon-scaled demand quantile
        """
        if confidence is None:
            confidence = self.confidence
        if self._is_degenerate():
            return self._fallback(horizon_days)

        ordered = np.sort(np.asarray(self._history, dtype=float))
        percentile = ordered[self._quantile_index(len(ordered), confidence)]
        return float(percentile) * horizon_days

    def expected_shortfall(self, horizon_days: float = 7,
                           confidence: float = None) -> float:
        """Mean of window values at or beyond the VaR index, horizon-scaled."""
        if confidence is None:
            confidence = self.confidence
        if self._is_degenerate():
            return self._fallback(horizon_days)

        ordered = np.sort(np.asarray(self._history, dtype=float))
        tail = ordered[self._quantile_index(len(ordered), confidence):]
        return float(np.mean(tail)) * horizon_days

    def parametric_estimate(self, horizon_days: float = 7,
                            confidence: float = None) -> float:
        """
        Normal-approximation VaR: (μ + z_c·σ) · horizon.

        Diagnostic only; the policies use the empirical estimate.
        """
        if confidence is None:
            confidence = self.confidence
        if self._is_degenerate():
            return self._fallback(horizon_days)

        values = np.asarray(self._history, dtype=float)
        z = stats.norm.ppf(confidence)
        return float(np.mean(values) + z * np.std(values, ddof=1)) * horizon_days

    def summary(self, short_horizon: int = 7, long_horizon: int = 30) -> dict:
        """Risk snapshot for reporting"""
        return {
            'observations': len(self._history),
            'degenerate_window': self._is_degenerate(),
            'confidence': self.confidence,
            'mean_daily': self.average(),
            f'var_{short_horizon}d': self.estimate(short_horizon),
            f'var_{long_horizon}d': self.estimate(long_horizon),
            f'es_{short_horizon}d': self.expected_shortfall(short_horizon),
            f'parametric_var_{short_horizon}d': self.parametric_estimate(short_horizon),
        }
