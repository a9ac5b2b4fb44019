"""Shared test fixtures."""

from pathlib import Path

import matplotlib
import pytest

matplotlib.use("Agg")

from demand_generator import generate_pair  # noqa: E402
from parameters import SimulationConfig  # noqa: E402


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def baseline_demand():
    """Deterministic 100-day history and 90-day future."""
    return generate_pair('baseline', seed=42)


@pytest.fixture
def small_config() -> SimulationConfig:
    """Reserve of 10,000 units so hand-computed numbers stay readable."""
    return SimulationConfig(initial_reserve=10000.0)


@pytest.fixture
def flat_history() -> list:
    """100 identical days: VaR(7d)=700, VaR(30d)=3000."""
    return [100.0] * 100
