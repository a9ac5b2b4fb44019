"""
Simulation Parameters
=====================

Configuration surface for the tiered reserve comparison:
- Risk window (capacity, minimum samples, confidence)
- Rebalance cadence
- Tier yields (L2 short-duration, L3 term)
- Adaptive tier bounds and fixed initial split
- Zero-reserve recovery base

Defaults reproduce the reference experiment (HKD 100M reserve).
"""

from dataclasses import dataclass, field, replace
from typing import Tuple


@dataclass(frozen=True)
class TierBounds:
    """Fractional [min, max] bounds per tier for the risk-adaptive policy"""
    l1_min: float = 0.10
    l1_max: float = 0.40
    l2_min: float = 0.30
    l2_max: float = 0.60
    l3_min: float = 0.0
    l3_max: float = 0.30

    def __post_init__(self):
        for tier in ('l1', 'l2', 'l3'):
            lo = getattr(self, f'{tier}_min')
            hi = getattr(self, f'{tier}_max')
            if lo < 0 or hi < 0:
                raise ValueError(f"{tier} bounds must be non-negative, got [{lo}, {hi}]")
            if lo > hi:
                raise ValueError(f"{tier} lower bound {lo} exceeds upper bound {hi}")


@dataclass(frozen=True)
class SimulationConfig:
    """Core parameters for one comparison run"""
    # Risk estimation
    confidence: float = 0.95
    window_size: int = 100
    min_samples: int = 30  # below this the estimator falls back to 2x mean
    short_horizon_days: int = 7
    long_horizon_days: int = 30

    # Rebalancing
    rebalance_every_days: int = 7

    # Yields (annual)
    yield_l2: float = 0.03
    yield_l3: float = 0.05

    # Allocation
    fixed_ratios: Tuple[float, float, float] = (0.20, 0.70, 0.10)
    adaptive_bounds: TierBounds = field(default_factory=TierBounds)

    # Reserve sizing
    initial_reserve: float = 10000 * 10000  # 100M
    recovery_base_multiplier: float = 100.0

    def __post_init__(self):
        """Validate parameter ranges"""
        if not 0.0 < self.confidence < 1.0:
            raise ValueError(f"confidence must lie in (0, 1), got {self.confidence}")
        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if self.min_samples < 0:
            raise ValueError(f"min_samples must be non-negative, got {self.min_samples}")
        if self.min_samples > self.window_size:
            raise ValueError(
                f"min_samples ({self.min_samples}) cannot exceed window_size "
                f"({self.window_size}); the estimator would never leave its fallback"
            )
        if self.short_horizon_days <= 0 or self.long_horizon_days <= 0:
            raise ValueError("risk horizons must be positive")
        if self.rebalance_every_days <= 0:
            raise ValueError(
                f"rebalance_every_days must be positive, got {self.rebalance_every_days}"
            )
        if self.yield_l2 < 0 or self.yield_l3 < 0:
            raise ValueError("tier yields must be non-negative")
        if len(self.fixed_ratios) != 3:
            raise ValueError(f"fixed_ratios needs three fractions, got {self.fixed_ratios}")
        if any(r < 0 for r in self.fixed_ratios):
            raise ValueError(f"fixed_ratios must be non-negative, got {self.fixed_ratios}")
        if self.initial_reserve < 0:
            raise ValueError(f"initial_reserve must be non-negative, got {self.initial_reserve}")
        if self.recovery_base_multiplier < 0:
            raise ValueError("recovery_base_multiplier must be non-negative")

    def with_overrides(self, **changes) -> 'SimulationConfig':
        """Copy with selected fields replaced (validated again)"""
        return replace(self, **changes)


DEFAULT_CONFIG = SimulationConfig()
