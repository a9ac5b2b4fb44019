"""
Reserve Allocation Policies
===========================

Two ways to split a reserve total across the liquidity tiers:

- FixedRatioPolicy: static 20/70/10 split, rescaled with the reserve size
- RiskAdaptivePolicy: L1 sized to 7-day VaR, L1+L2 to 30-day VaR, L3 residual

Both satisfy the ReservePolicy capability
``rebalance(current, total, var7, var30) -> ReserveState``.
"""

from dataclasses import dataclass, field
from typing import Protocol, Tuple

import numpy as np

from parameters import SimulationConfig, TierBounds, DEFAULT_CONFIG
from reserve_engine import ReserveState

Ratios = Tuple[float, float, float]

FIXED_RATIOS: Ratios = (0.20, 0.70, 0.10)


class ReservePolicy(Protocol):
    """Capability shared by all allocation policies"""
    name: str

    @property
    def initial_ratios(self) -> Ratios:
        ...

    def rebalance(self, current: ReserveState, total: float,
                  var7: float, var30: float) -> ReserveState:
        ...


def split_total(total: float, ratios: Ratios) -> ReserveState:
    """Split ``total`` by the supplied (unchecked) fractions"""
    r1, r2, r3 = ratios
    return ReserveState(total * r1, total * r2, total * r3)


@dataclass(frozen=True)
class FixedRatioPolicy:
    """
    Fixed-ratio allocation.

    A rebalance rescales the *existing* balances to the new total, so the
    current proportions survive; the original split is only used when the
    reserve is empty.
    """
    ratios: Ratios = FIXED_RATIOS
    name: str = "Fixed Ratio"

    @property
    def initial_ratios(self) -> Ratios:
        return self.ratios

    def rebalance(self, current: ReserveState, total: float,
                  var7: float = 0.0, var30: float = 0.0) -> ReserveState:
        current_total = current.total
        if current_total > 0:
            scale = total / current_total
            return ReserveState(current.l1 * scale,
                                current.l2 * scale,
                                current.l3 * scale)
        return split_total(total, self.ratios)


@dataclass(frozen=True)
class RiskAdaptivePolicy:
    """
    VaR-driven allocation.

    Constraints (clamped in order, then rescaled to T):
        L1      >= VaR(7d)   within [10%, 40%] of T
        L1 + L2 >= VaR(30d)  L2 within [30%, 60%] of T
        L3 = residual        within [0%, 30%] of T

    Rescaling after clamping can push a tier back outside its bounds; this
    is a heuristic, not a constrained solver.
    """
    bounds: TierBounds = field(default_factory=TierBounds)
    seed_ratios: Ratios = FIXED_RATIOS
    name: str = "Risk-Adaptive (VaR)"

    @property
    def initial_ratios(self) -> Ratios:
        return self.seed_ratios

    def target_allocation(self, total: float, var7: float,
                          var30: float) -> ReserveState:
        """Solve the clamped allocation for reserve size ``total``"""
        b = self.bounds

        l1 = float(np.clip(var7, b.l1_min * total, b.l1_max * total))
        l2 = float(np.clip(max(0.0, var30 - l1), b.l2_min * total, b.l2_max * total))
        l3 = float(np.clip(total - l1 - l2, b.l3_min * total, b.l3_max * total))

        s = l1 + l2 + l3
        if s <= 0:
            return ReserveState(0.0, 0.0, 0.0)

        # L3 as residual keeps the sum exact
        l1 = l1 * total / s
        l2 = l2 * total / s
        l3 = max(0.0, total - l1 - l2)
        return ReserveState(l1, l2, l3)

    def rebalance(self, current: ReserveState, total: float,
                  var7: float, var30: float) -> ReserveState:
        return self.target_allocation(total, var7, var30)


def build_policies(config: SimulationConfig = DEFAULT_CONFIG):
    """(fixed, adaptive) policy pair configured from ``config``"""
    fixed = FixedRatioPolicy(ratios=tuple(config.fixed_ratios))
    adaptive = RiskAdaptivePolicy(bounds=config.adaptive_bounds,
                                  seed_ratios=tuple(config.fixed_ratios))
    return fixed, adaptive
