"""
Three-Tier Reserve Engine
=========================

Tier ladder for a single reserve currency:
- L1: immediate liquidity (cash / demand deposits), no yield
- L2: short-duration assets, 3%/yr, first line of refill
- L3: term assets, 5%/yr, last line of refill

Each redemption is paid from L1; an L1 shortfall cascades L2 → L1, then
L3 → L1. A synthetic inflow equal to the redemption is spread back across the
tiers in post-redemption proportions, so the reserve size is stationary
except when every tier is drained.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple, TYPE_CHECKING

from parameters import SimulationConfig, DEFAULT_CONFIG

if TYPE_CHECKING:
    from reserve_policies import ReservePolicy

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


@dataclass
class ReserveState:
    """Balances per tier (same monetary unit as the demand series)"""
    l1: float = 0.0
    l2: float = 0.0
    l3: float = 0.0

    @property
    def total(self) -> float:
        return self.l1 + self.l2 + self.l3

    @property
    def ratios(self) -> Tuple[float, float, float]:
        """Tier shares of the total (zeros for an empty reserve)"""
        total = self.total
        if total <= 0:
            return (0.0, 0.0, 0.0)
        return (self.l1 / total, self.l2 / total, self.l3 / total)

    def copy(self) -> 'ReserveState':
        return ReserveState(self.l1, self.l2, self.l3)

    def as_dict(self) -> Dict[str, float]:
        return {'l1': self.l1, 'l2': self.l2, 'l3': self.l3, 'total': self.total}


@dataclass
class ReserveMetrics:
    """Cumulative run counters; all non-decreasing within a run"""
    total_redeemed: float = 0.0
    total_days: int = 0
    shortfall_count: int = 0
    max_gap: float = 0.0
    total_return: float = 0.0
    compliance_days: int = 0
    l2_refill_count: int = 0
    l2_refill_amount: float = 0.0
    l3_refill_count: int = 0
    l3_refill_amount: float = 0.0
    unpaid_total: float = 0.0
    recovery_count: int = 0


@dataclass
class RedemptionResult:
    """Outcome of one ``redeem`` call"""
    requested: float
    paid: float
    unpaid: float = 0.0
    shortfall: bool = False
    gap: float = 0.0
    refill_l2: float = 0.0
    refill_l3: float = 0.0
    recovered: bool = False

    @property
    def fully_paid(self) -> bool:
        return self.unpaid == 0.0


@dataclass
class PolicyReport:
    """End-of-run metrics for one policy"""
    name: str
    total_reserve: float
    tiers: Dict[str, float]
    annualized_return: float
    return_rate_pct: float
    shortfall_count: int
    l2_refill_count: int
    l2_refill_amount: float
    l3_refill_count: int
    l3_refill_amount: float
    max_gap: float
    compliance_days: int
    compliance_rate_pct: float
    risk_adjusted_return: float
    total_days: int
    total_redeemed: float
    unpaid_total: float = 0.0
    recovery_count: int = 0
    risk_threshold: float = 0.0

    def to_dict(self) -> Dict:
        return asdict(self)


class ReserveEngine:
    """
    Reserve state machine driven by one allocation policy.

    Per-day call order (the caller's responsibility):
        rebalance → check_compliance → accrue_return → redeem
    """

    def __init__(self, policy: 'ReservePolicy',
                 config: SimulationConfig = DEFAULT_CONFIG,
                 name: Optional[str] = None):
        self.policy = policy
        self.config = config
        self.name = name or policy.name
        self.state = ReserveState()
        self.metrics = ReserveMetrics()

    @property
    def total(self) -> float:
        return self.state.total

    def snapshot(self) -> ReserveState:
        return self.state.copy()

    def initialize(self, total: float,
                   ratios: Optional[Tuple[float, float, float]] = None) -> None:
        """Split ``total`` across tiers (policy's initial ratios by default)"""
        if ratios is None:
            ratios = self.policy.initial_ratios
        r1, r2, r3 = ratios
        self.state = ReserveState(total * r1, total * r2, total * r3)

    def rebalance(self, var7: float, var30: float,
                  total: Optional[float] = None) -> ReserveState:
        """Replace the tier balances with the policy's target for ``total``"""
        if total is None:
            total = self.state.total
        self.state = self.policy.rebalance(self.state.copy(), total, var7, var30)
        return self.snapshot()

    def check_compliance(self, threshold: float) -> bool:
        """LCR-style check: does L1 alone cover the short-horizon VaR?"""
        compliant = bool(self.state.l1 >= threshold)
        if compliant:
            self.metrics.compliance_days += 1
        return compliant

    def accrue_return(self, days: float = 1,
                      yield_l2: Optional[float] = None,
                      yield_l3: Optional[float] = None) -> float:
        """Accrue L2/L3 yield on current (opening) balances"""
        if yield_l2 is None:
            yield_l2 = self.config.yield_l2
        if yield_l3 is None:
            yield_l3 = self.config.yield_l3

        l2_daily = self.state.l2 * yield_l2 / DAYS_PER_YEAR
        l3_daily = self.state.l3 * yield_l3 / DAYS_PER_YEAR
        earned = (l2_daily + l3_daily) * days
        self.metrics.total_return += earned
        return earned

    def redeem(self, amount: float, day: int) -> RedemptionResult:
        """
        Pay one redemption, cascading any L1 shortfall through L2 then L3.

        Args:
            amount: Redemption amount (non-negative)
            day: 1-based simulation day (becomes ``total_days``)

        Returns:
            RedemptionResult with the paid/unpaid split and refills
        """
        if amount < 0:
            raise ValueError(f"redemption amount must be non-negative, got {amount}")

        s = self.state
        m = self.metrics
        result = RedemptionResult(requested=amount, paid=amount)
        drained = False

        if s.l1 < amount:
            gap = amount - s.l1
            result.shortfall = True
            result.gap = gap
            m.shortfall_count += 1
            m.max_gap = max(m.max_gap, gap)

            need = gap
            if s.l2 >= need:
                # L2 alone covers it
                s.l2 -= need
                s.l1 += need
                m.l2_refill_count += 1
                m.l2_refill_amount += need
                result.refill_l2 = need
            else:
                from_l2 = s.l2
                from_l3 = need - from_l2
                if s.l3 >= from_l3:
                    s.l1 += from_l2 + from_l3
                    s.l2 = 0.0
                    s.l3 -= from_l3
                    m.l2_refill_amount += from_l2
                    m.l3_refill_count += 1
                    m.l3_refill_amount += from_l3
                    result.refill_l2 = from_l2
                    result.refill_l3 = from_l3
                else:
                    available = s.total
                    result.unpaid = amount - available
                    result.paid = available
                    m.unpaid_total += result.unpaid
                    s.l1 = s.l2 = s.l3 = 0.0
                    drained = True
                    logger.warning(
                        "%s: day %d redemption %.2f exceeds total reserve %.2f, "
                        "unpaid %.2f", self.name, day, amount, available, result.unpaid
                    )

        if not drained:
            s.l1 = max(0.0, s.l1 - amount)

        self._replenish(amount, result, day)

        m.total_redeemed += amount
        m.total_days = day
        return result

    def _replenish(self, inflow: float, result: RedemptionResult, day: int) -> None:
        """Spread a deposit equal to the redemption in current tier proportions"""
        s = self.state
        if s.total > 0:
            r1, r2, r3 = s.ratios
            s.l1 += inflow * r1
            s.l2 += inflow * r2
            s.l3 += inflow * r3
            return
        if inflow <= 0:
            return

        base = inflow * self.config.recovery_base_multiplier
        self.initialize(base)
        self.metrics.recovery_count += 1
        result.recovered = True
        logger.warning("%s: reserve exhausted on day %d, re-seeded with %.2f",
                       self.name, day, base)

    def snapshot_metrics(self, risk_threshold: float,
                         initial_reserve: float) -> PolicyReport:
        """
        Derive end-of-run metrics.

        annualized_return = total_return · 365 / total_days
        return_rate_pct   = annualized_return / initial_reserve · 100
        risk_adjusted     = annualized_return / shortfall_count (if any)
        """
        m = self.metrics
        if m.total_days > 0:
            annualized = m.total_return * DAYS_PER_YEAR / m.total_days
            compliance_rate = m.compliance_days / m.total_days * 100
        else:
            annualized = 0.0
            compliance_rate = 0.0

        return_rate = annualized / initial_reserve * 100 if initial_reserve > 0 else 0.0
        risk_adjusted = (annualized / m.shortfall_count
                         if m.shortfall_count > 0 else annualized)

        return PolicyReport(
            name=self.name,
            total_reserve=self.state.total,
            tiers=self.state.as_dict(),
            annualized_return=annualized,
            return_rate_pct=return_rate,
            shortfall_count=m.shortfall_count,
            l2_refill_count=m.l2_refill_count,
            l2_refill_amount=m.l2_refill_amount,
            l3_refill_count=m.l3_refill_count,
            l3_refill_amount=m.l3_refill_amount,
            max_gap=m.max_gap,
            compliance_days=m.compliance_days,
            compliance_rate_pct=compliance_rate,
            risk_adjusted_return=risk_adjusted,
            total_days=m.total_days,
            total_redeemed=m.total_redeemed,
            unpaid_total=m.unpaid_total,
            recovery_count=m.recovery_count,
            risk_threshold=risk_threshold,
        )
