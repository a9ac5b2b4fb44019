"""Tests for the fixed-ratio and risk-adaptive allocation policies."""

import pytest

from parameters import SimulationConfig, TierBounds
from reserve_engine import ReserveState
from reserve_policies import (
    FixedRatioPolicy,
    RiskAdaptivePolicy,
    build_policies,
    split_total,
)


def test_adaptive_bound_example():
    policy = RiskAdaptivePolicy()
    state = policy.target_allocation(1_000_000.0, 150_000.0, 400_000.0)

    # L1=150k (within bounds), L2 floored to 300k, L3 capped to 300k,
    # then 150:300:300 rescaled to 1M
    assert state.l1 == pytest.approx(200_000.0)
    assert state.l2 == pytest.approx(400_000.0)
    assert state.l3 == pytest.approx(400_000.0)
    assert state.l1 + state.l2 + state.l3 == 1_000_000.0


def test_adaptive_upper_bounds_bind():
    state = RiskAdaptivePolicy().target_allocation(1_000_000.0, 5e9, 5e9)
    assert state == ReserveState(400_000.0, 600_000.0, 0.0)


def test_adaptive_rescale_can_leave_bounds():
    # Zero risk: 100k / 300k / 300k scaled up to 1M pushes L3 above its 30% cap
    state = RiskAdaptivePolicy().target_allocation(1_000_000.0, 0.0, 0.0)

    assert state.total == pytest.approx(1_000_000.0)
    assert state.l1 == pytest.approx(1_000_000.0 / 7)
    assert state.l2 == pytest.approx(3_000_000.0 / 7)
    assert state.l3 > 0.30 * 1_000_000.0


def test_adaptive_zero_total():
    assert RiskAdaptivePolicy().target_allocation(0.0, 100.0, 200.0) == ReserveState()


def test_adaptive_custom_bounds():
    bounds = TierBounds(l1_min=0.5, l1_max=0.5, l2_min=0.5, l2_max=0.5, l3_max=0.0)
    state = RiskAdaptivePolicy(bounds=bounds).target_allocation(1000.0, 1.0, 1.0)
    assert state == ReserveState(500.0, 500.0, 0.0)


def test_adaptive_rebalance_ignores_current_state():
    policy = RiskAdaptivePolicy()
    a = policy.rebalance(ReserveState(1.0, 2.0, 3.0), 1_000_000.0, 150_000.0, 400_000.0)
    b = policy.rebalance(ReserveState(9.0, 0.0, 0.0), 1_000_000.0, 150_000.0, 400_000.0)
    assert a == b


def test_adaptive_rebalance_is_idempotent():
    policy = RiskAdaptivePolicy()
    current = ReserveState(100_000.0, 500_000.0, 300_000.0)
    first = policy.rebalance(current, 1_000_000.0, 150_000.0, 400_000.0)
    second = policy.rebalance(first, 1_000_000.0, 150_000.0, 400_000.0)
    assert first == second


def test_fixed_rebalance_is_idempotent():
    policy = FixedRatioPolicy()
    current = ReserveState(100_000.0, 500_000.0, 300_000.0)
    first = policy.rebalance(current, 1_000_000.0, 150_000.0, 400_000.0)
    second = policy.rebalance(first, 1_000_000.0, 150_000.0, 400_000.0)

    assert second.l1 == pytest.approx(first.l1)
    assert second.l2 == pytest.approx(first.l2)
    assert second.l3 == pytest.approx(first.l3)
    assert first.total == pytest.approx(1_000_000.0)


def test_fixed_rescales_current_proportions():
    policy = FixedRatioPolicy()
    state = policy.rebalance(ReserveState(10.0, 20.0, 70.0), 200.0, 0.0, 0.0)

    # current 10/20/70 split survives; the 20/70/10 target is not restored
    assert state == ReserveState(20.0, 40.0, 140.0)


def test_fixed_empty_reserve_uses_initial_split():
    policy = FixedRatioPolicy()
    state = policy.rebalance(ReserveState(), 1000.0, 0.0, 0.0)
    assert state.l1 == pytest.approx(200.0)
    assert state.l2 == pytest.approx(700.0)
    assert state.l3 == pytest.approx(100.0)


def test_fixed_ignores_risk_inputs():
    policy = FixedRatioPolicy()
    current = ReserveState(200.0, 700.0, 100.0)
    assert policy.rebalance(current, 1000.0, 0.0, 0.0) == \
        policy.rebalance(current, 1000.0, 1e9, 1e9)


def test_split_total():
    assert split_total(100.0, (0.5, 0.25, 0.25)) == ReserveState(50.0, 25.0, 25.0)


def test_build_policies_from_config():
    config = SimulationConfig(fixed_ratios=(0.3, 0.6, 0.1),
                              adaptive_bounds=TierBounds(l1_min=0.2))
    fixed, adaptive = build_policies(config)

    assert fixed.initial_ratios == (0.3, 0.6, 0.1)
    assert adaptive.initial_ratios == (0.3, 0.6, 0.1)
    assert adaptive.bounds.l1_min == 0.2
    assert fixed.name != adaptive.name
