"""Tests for configuration validation."""

import pytest

from parameters import DEFAULT_CONFIG, SimulationConfig, TierBounds


def test_defaults():
    c = DEFAULT_CONFIG
    assert c.confidence == 0.95
    assert c.window_size == 100
    assert c.min_samples == 30
    assert c.rebalance_every_days == 7
    assert c.fixed_ratios == (0.20, 0.70, 0.10)
    assert c.initial_reserve == 1e8
    assert c.adaptive_bounds == TierBounds()


@pytest.mark.parametrize("kwargs", [
    {'confidence': 1.0},
    {'confidence': 0.0},
    {'window_size': 0},
    {'min_samples': -1},
    {'window_size': 20, 'min_samples': 30},
    {'short_horizon_days': 0},
    {'rebalance_every_days': 0},
    {'yield_l3': -0.01},
    {'fixed_ratios': (0.5, 0.5)},
    {'fixed_ratios': (0.5, 0.6, -0.1)},
    {'initial_reserve': -1.0},
    {'recovery_base_multiplier': -2.0},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [
    {'l1_min': 0.5, 'l1_max': 0.4},
    {'l3_min': -0.1},
])
def test_invalid_bounds(kwargs):
    with pytest.raises(ValueError):
        TierBounds(**kwargs)


def test_with_overrides_copies_and_revalidates():
    c = DEFAULT_CONFIG.with_overrides(confidence=0.99, rebalance_every_days=14)
    assert c.confidence == 0.99
    assert c.rebalance_every_days == 14
    assert DEFAULT_CONFIG.confidence == 0.95

    with pytest.raises(ValueError):
        DEFAULT_CONFIG.with_overrides(window_size=-5)


def test_min_samples_may_equal_window():
    c = SimulationConfig(window_size=30, min_samples=30)
    assert c.min_samples == c.window_size
    assert SimulationConfig(min_samples=0).min_samples == 0
