"""
Synthetic Redemption Demand
===========================

Daily redemption series for the reserve comparison:
- Base level with optional linear trend
- Uniform multiplicative noise (± volatility)
- Scheduled spike days (stress events)

Amounts are generated in units of 10k and returned in base currency units,
rounded to whole units. Named scenarios reproduce the reference experiment.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

UNIT = 10000  # generator amounts are quoted in 10k units


@dataclass(frozen=True)
class DemandScenario:
    """Parameters of one synthetic redemption series"""
    days: int
    base_amount: float = 200.0
    volatility: float = 0.3
    trend: float = 0.0
    spike_days: Tuple[int, ...] = ()
    spike_amount: float = 1000.0
    description: str = ""


@dataclass(frozen=True)
class DemandPair:
    """Calibration history plus simulated future"""
    history: DemandScenario
    future: DemandScenario
    notes: List[str] = field(default_factory=list)


DEMAND_SCENARIOS: Dict[str, DemandPair] = {
    'baseline': DemandPair(
        history=DemandScenario(
            days=100, base_amount=200, volatility=0.3,
            spike_days=(20, 45, 70), spike_amount=800,
            description="100-day calibration window, three moderate spikes",
        ),
        future=DemandScenario(
            days=90, base_amount=200, volatility=0.4, trend=0.5,
            spike_days=(10, 30, 60), spike_amount=1000,
            description="90-day test period, mild upward trend",
        ),
        notes=["Reference experiment (HKD 100M reserve)"],
    ),
    'calm': DemandPair(
        history=DemandScenario(days=100, base_amount=200, volatility=0.1),
        future=DemandScenario(days=90, base_amount=200, volatility=0.1),
        notes=["No spikes, low noise"],
    ),
    'stress': DemandPair(
        history=DemandScenario(
            days=100, base_amount=200, volatility=0.3,
            spike_days=(20, 45, 70), spike_amount=800,
        ),
        future=DemandScenario(
            days=90, base_amount=250, volatility=0.6, trend=2.0,
            spike_days=(5, 12, 19, 40, 41, 42, 75), spike_amount=2500,
        ),
        notes=["Clustered spikes, steeper trend"],
    ),
    'bank_run': DemandPair(
        history=DemandScenario(days=100, base_amount=200, volatility=0.2),
        future=DemandScenario(
            days=30, base_amount=200, volatility=0.2,
            spike_days=tuple(range(10, 16)), spike_amount=60000,
        ),
        notes=["Six-day run larger than the whole reserve"],
    ),
}


def generate_redemption_series(days: int,
                               base_amount: float = 200.0,
                               volatility: float = 0.3,
                               trend: float = 0.0,
                               spike_days: Sequence[int] = (),
                               spike_amount: float = 1000.0,
                               seed: Optional[int] = 42) -> np.ndarray:
    """
    Generate daily redemption amounts.

    amount_t = max(0, (base + trend·t) · (1 + U(-1, 1)·vol)) · 10k
    (replaced by ``spike_amount`` on spike days)

    Args:
        days: Series length
        base_amount: Base daily redemption (10k units)
        volatility: Half-width of the multiplicative noise band
        trend: Linear drift per day (10k units)
        spike_days: Day indices replaced by ``spike_amount``
        spike_amount: Spike size (10k units)
        seed: Random seed (None for nondeterministic)

    Returns:
        Array of non-negative whole-unit amounts
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")
    if volatility < 0:
        raise ValueError(f"volatility must be non-negative, got {volatility}")

    rng = np.random.RandomState(seed)
    t = np.arange(days, dtype=float)

    amounts = base_amount + trend * t
    shocks = rng.uniform(-1.0, 1.0, size=days)
    amounts = amounts * (1.0 + shocks * volatility)

    spikes = [d for d in spike_days if 0 <= d < days]
    if spikes:
        amounts[spikes] = spike_amount

    amounts = np.maximum(0.0, amounts)
    return np.floor(amounts * UNIT + 0.5)


def generate_scenario(scenario: DemandScenario, seed: Optional[int] = 42) -> np.ndarray:
    return generate_redemption_series(
        scenario.days,
        base_amount=scenario.base_amount,
        volatility=scenario.volatility,
        trend=scenario.trend,
        spike_days=scenario.spike_days,
        spike_amount=scenario.spike_amount,
        seed=seed,
    )


def generate_pair(name: str = 'baseline',
                  seed: Optional[int] = 42) -> Tuple[np.ndarray, np.ndarray]:
    """(history, future) for a named scenario; future uses ``seed + 1``"""
    if name not in DEMAND_SCENARIOS:
        raise ValueError(
            f"Unknown demand scenario: {name} (available: {sorted(DEMAND_SCENARIOS)})"
        )
    pair = DEMAND_SCENARIOS[name]
    future_seed = None if seed is None else seed + 1
    return generate_scenario(pair.history, seed), generate_scenario(pair.future, future_seed)


def load_series(filepath) -> Optional[List[float]]:
    """
    Load a JSON list of daily amounts.

    Returns None if the file is missing, not valid JSON, or not a flat
    list of numbers.
    """
    path = Path(filepath)
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.info("could not load demand series from %s: %s", path, e)
        return None

    if not isinstance(data, list):
        logger.info("demand series in %s is not a list", path)
        return None
    try:
        return [float(x) for x in data]
    except (TypeError, ValueError) as e:
        logger.info("demand series in %s has a non-numeric entry: %s", path, e)
        return None


def save_series(series: Sequence[float], filepath) -> Path:
    path = Path(filepath)
    with open(path, 'w') as f:
        json.dump([float(x) for x in series], f, indent=2)
    return path
