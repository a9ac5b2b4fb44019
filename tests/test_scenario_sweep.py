"""Tests for parameter and scenario sweeps."""

import pytest

from scenario_sweep import (
    SWEEPABLE,
    summarize_sweep,
    sweep_demand_scenarios,
    sweep_parameter,
)


def test_sweep_confidence(baseline_demand):
    history, future = baseline_demand
    results = sweep_parameter('confidence', [0.90, 0.99], history, future)

    assert results['parameter'] == 'confidence'
    assert results['value'] == [0.90, 0.99]
    for key in ('fixed_return_pct', 'adaptive_shortfalls', 'initial_var7'):
        assert len(results[key]) == 2
    # higher confidence never lowers the empirical quantile
    assert results['initial_var7'][1] >= results['initial_var7'][0]
    # fixed policy ignores the risk estimate for allocation
    assert results['fixed_return_pct'][0] == pytest.approx(results['fixed_return_pct'][1])


def test_sweep_cadence(flat_history, small_config):
    results = sweep_parameter('rebalance_every_days', [1, 7, 30],
                              flat_history, [100.0] * 30, small_config)
    assert results['adaptive_shortfalls'] == [0, 0, 0]


def test_sweep_unknown_parameter(baseline_demand):
    history, future = baseline_demand
    with pytest.raises(ValueError, match="Cannot sweep"):
        sweep_parameter('fixed_ratios', [(0.3, 0.6, 0.1)], history, future)
    assert 'confidence' in SWEEPABLE


def test_sweep_invalid_value(baseline_demand):
    history, future = baseline_demand
    with pytest.raises(ValueError):
        sweep_parameter('confidence', [1.5], history, future)


def test_sweep_demand_scenarios():
    results = sweep_demand_scenarios(scenario_names=['calm', 'baseline'], seed=3)
    assert set(results) == {'calm', 'baseline'}
    assert results['calm']['fixed']['total_days'] == 90
    assert 'shortfall_reduction' in results['baseline']['differential']


def test_summarize_prefers_fewest_shortfalls_then_return():
    results = {
        'parameter': 'confidence',
        'value': [0.90, 0.95, 0.99],
        'adaptive_shortfalls': [3, 1, 1],
        'adaptive_return_pct': [4.0, 3.2, 3.5],
        'return_delta_pct': [0.5, -0.1, 0.2],
    }
    summary = summarize_sweep(results)

    assert summary['best_value'] == 0.99
    assert summary['best_adaptive_shortfalls'] == 1
    assert summary['best_adaptive_return_pct'] == pytest.approx(3.5)
    assert summary['adaptive_outperforms_on_return'] == 2
    assert summary['n_points'] == 3
    assert 'confidence=0.99' in summary['interpretation']


def test_summarize_empty():
    summary = summarize_sweep({'parameter': 'confidence', 'value': []})
    assert summary == {'parameter': 'confidence', 'n_points': 0}
