"""
Reserve Policy Comparison
=========================

Runs a fixed-ratio and a risk-adaptive reserve side by side on the same
redemption series and reports the differences.

Daily order (load-bearing for the metrics):
    1. rebalance (adaptive only, every ``rebalance_every_days``)
    2. compliance check against the latest 7-day VaR
    3. one day of L2/L3 yield on opening balances
    4. redemption (with synthetic inflow)
    5. observation added to the risk window
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from parameters import SimulationConfig, DEFAULT_CONFIG
from reserve_engine import ReserveEngine, PolicyReport
from reserve_policies import build_policies
from risk_estimator import RiskEstimator

logger = logging.getLogger(__name__)


@dataclass
class ComparisonReport:
    """Result of one comparison run"""
    fixed: PolicyReport
    adaptive: PolicyReport
    initial_var7: float
    initial_var30: float
    initial_reserve: float
    differential: Dict[str, float]
    risk_summary: Dict = field(default_factory=dict)
    daily: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'initial_reserve': self.initial_reserve,
            'initial_var7': self.initial_var7,
            'initial_var30': self.initial_var30,
            'fixed': self.fixed.to_dict(),
            'adaptive': self.adaptive.to_dict(),
            'differential': dict(self.differential),
            'risk_summary': dict(self.risk_summary),
            'daily': list(self.daily),
        }


def _as_demand(values: Sequence[float], label: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{label} must be a one-dimensional sequence")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{label} contains non-finite amounts")
    if np.any(arr < 0):
        raise ValueError(f"{label} contains negative amounts")
    return arr


def differential_summary(fixed: PolicyReport, adaptive: PolicyReport) -> Dict[str, float]:
    """
    Adaptive-vs-fixed deltas; positive means the adaptive policy did better.

    Return and compliance deltas are adaptive − fixed; shortfall, refill
    and gap deltas are fixed − adaptive (reductions).
    """
    return {
        'return_rate_delta_pct': adaptive.return_rate_pct - fixed.return_rate_pct,
        'annualized_return_delta': adaptive.annualized_return - fixed.annualized_return,
        'shortfall_reduction': fixed.shortfall_count - adaptive.shortfall_count,
        'l2_refill_count_reduction': fixed.l2_refill_count - adaptive.l2_refill_count,
        'l3_refill_count_reduction': fixed.l3_refill_count - adaptive.l3_refill_count,
        'l2_refill_amount_reduction': fixed.l2_refill_amount - adaptive.l2_refill_amount,
        'l3_refill_amount_reduction': fixed.l3_refill_amount - adaptive.l3_refill_amount,
        'compliance_rate_delta_pct': adaptive.compliance_rate_pct - fixed.compliance_rate_pct,
        'max_gap_reduction': fixed.max_gap - adaptive.max_gap,
    }


class ComparisonRunner:
    """
    Owns one estimator and two engines; not reusable across runs.
    """

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG,
                 record_daily: bool = False):
        self.config = config
        self.record_daily = record_daily
        self.estimator = RiskEstimator(
            confidence=config.confidence,
            window_size=config.window_size,
            min_samples=config.min_samples,
        )
        fixed_policy, adaptive_policy = build_policies(config)
        self.fixed = ReserveEngine(fixed_policy, config)
        self.adaptive = ReserveEngine(adaptive_policy, config)
        self._used = False

    def _risk(self):
        c = self.config
        return (self.estimator.estimate(c.short_horizon_days, c.confidence),
                self.estimator.estimate(c.long_horizon_days, c.confidence))

    def run(self, history: Sequence[float], future: Sequence[float]) -> ComparisonReport:
        """
        Calibrate on ``history`` and simulate ``future`` for both policies.

        Args:
            history: Pre-simulation daily redemptions (risk calibration only)
            future: Simulated daily redemptions

        Returns:
            ComparisonReport with per-policy metrics and deltas
        """
        if self._used:
            raise RuntimeError("ComparisonRunner instances are single-use; build a new one")
        history = _as_demand(history, 'history')
        future = _as_demand(future, 'future')
        self._used = True

        c = self.config
        self.estimator.extend(history)
        var7, var30 = self._risk()
        logger.info("calibrated on %d days: VaR(%dd)=%.2f VaR(%dd)=%.2f",
                    len(history), c.short_horizon_days, var7, c.long_horizon_days, var30)

        self.fixed.initialize(c.initial_reserve)
        self.adaptive.initialize(c.initial_reserve)
        self.adaptive.rebalance(var7, var30, total=c.initial_reserve)

        threshold = var7
        daily = []
        for d, amount in enumerate(future.tolist()):
            if d > 0 and d % c.rebalance_every_days == 0:
                current7, current30 = self._risk()
                self.adaptive.rebalance(current7, current30)
                threshold = current7
                logger.debug("day %d rebalance: VaR7=%.2f VaR30=%.2f", d, current7, current30)

            fixed_ok = self.fixed.check_compliance(threshold)
            adaptive_ok = self.adaptive.check_compliance(threshold)

            self.fixed.accrue_return(1)
            self.adaptive.accrue_return(1)

            fixed_result = self.fixed.redeem(amount, d + 1)
            adaptive_result = self.adaptive.redeem(amount, d + 1)

            self.estimator.add_observation(amount)

            if self.record_daily:
                daily.append({
                    'day': d + 1,
                    'demand': float(amount),
                    'threshold': threshold,
                    'fixed': self.fixed.state.as_dict(),
                    'adaptive': self.adaptive.state.as_dict(),
                    'fixed_compliant': fixed_ok,
                    'adaptive_compliant': adaptive_ok,
                    'fixed_shortfall': fixed_result.shortfall,
                    'adaptive_shortfall': adaptive_result.shortfall,
                })

        fixed_report = self.fixed.snapshot_metrics(var7, c.initial_reserve)
        adaptive_report = self.adaptive.snapshot_metrics(var7, c.initial_reserve)

        return ComparisonReport(
            fixed=fixed_report,
            adaptive=adaptive_report,
            initial_var7=var7,
            initial_var30=var30,
            initial_reserve=c.initial_reserve,
            differential=differential_summary(fixed_report, adaptive_report),
            risk_summary=self.estimator.summary(c.short_horizon_days, c.long_horizon_days),
            daily=daily,
        )


def run_comparison(history: Sequence[float], future: Sequence[float],
                   config: Optional[SimulationConfig] = None,
                   record_daily: bool = False) -> ComparisonReport:
    """Convenience wrapper: fresh runner, one run"""
    runner = ComparisonRunner(config or DEFAULT_CONFIG, record_daily=record_daily)
    return runner.run(history, future)
