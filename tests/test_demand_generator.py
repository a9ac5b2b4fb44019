"""Tests for synthetic redemption demand."""

import numpy as np
import pytest

from demand_generator import (
    DEMAND_SCENARIOS,
    UNIT,
    generate_pair,
    generate_redemption_series,
    load_series,
    save_series,
)


def test_same_seed_same_series():
    a = generate_redemption_series(90, seed=7)
    b = generate_redemption_series(90, seed=7)
    c = generate_redemption_series(90, seed=8)

    np.testing.assert_array_equal(a, b)
    assert not np.array_equal(a, c)


def test_series_shape_and_units():
    series = generate_redemption_series(60, base_amount=200, volatility=0.5, seed=1)

    assert series.shape == (60,)
    assert np.all(series >= 0)
    np.testing.assert_array_equal(series, np.floor(series))
    # noise band is ±50% around 200 units of 10k
    assert series.min() >= 100 * UNIT
    assert series.max() <= 300 * UNIT


def test_spike_days_replace_amount():
    series = generate_redemption_series(30, spike_days=(3, 17, 99), spike_amount=900, seed=2)
    assert series[3] == 900 * UNIT
    assert series[17] == 900 * UNIT


def test_zero_volatility_follows_trend():
    series = generate_redemption_series(5, base_amount=100, volatility=0.0, trend=10.0)
    np.testing.assert_array_equal(series, np.array([100, 110, 120, 130, 140]) * UNIT)


def test_negative_levels_clip_to_zero():
    series = generate_redemption_series(10, base_amount=10, volatility=0.0, trend=-5.0)
    assert series[0] == 10 * UNIT
    assert np.all(series[3:] == 0)


def test_empty_series():
    assert len(generate_redemption_series(0)) == 0


@pytest.mark.parametrize("kwargs", [{'days': -1}, {'days': 5, 'volatility': -0.1}])
def test_rejects_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        generate_redemption_series(**kwargs)


def test_baseline_pair_lengths():
    history, future = generate_pair('baseline', seed=42)
    assert len(history) == 100
    assert len(future) == 90
    assert history[20] == 800 * UNIT
    assert future[10] == 1000 * UNIT


def test_pair_uses_distinct_seeds():
    history, future = generate_pair('calm', seed=5)
    np.testing.assert_array_equal(history, generate_redemption_series(
        100, base_amount=200, volatility=0.1, seed=5))
    np.testing.assert_array_equal(future, generate_redemption_series(
        90, base_amount=200, volatility=0.1, seed=6))


@pytest.mark.parametrize("name", sorted(DEMAND_SCENARIOS))
def test_every_scenario_generates(name):
    history, future = generate_pair(name, seed=0)
    assert len(history) == DEMAND_SCENARIOS[name].history.days
    assert len(future) == DEMAND_SCENARIOS[name].future.days
    assert np.all(future >= 0)


def test_unknown_scenario():
    with pytest.raises(ValueError, match="Unknown demand scenario"):
        generate_pair('meteor_strike')


def test_save_and_load_series(tmp_path):
    path = save_series(np.array([1.0, 2.5, 30000.0]), tmp_path / "demand.json")
    assert load_series(path) == [1.0, 2.5, 30000.0]


def test_load_series_missing_file(tmp_path):
    assert load_series(tmp_path / "nope.json") is None


def test_load_series_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[1, 2,")
    assert load_series(path) is None


@pytest.mark.parametrize("content", ["[null]", "5", '{"a": 1}', '["ten"]', "[[1, 2]]"])
def test_load_series_rejects_non_numeric_lists(tmp_path, content):
    path = tmp_path / "odd.json"
    path.write_text(content)
    assert load_series(path) is None
