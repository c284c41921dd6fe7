"""
Monte Carlo path simulation for a recurring-contribution portfolio.

This module provides:
- SimulationParameters: immutable, validated run inputs
- PathSimulator: chunked (optionally threaded) trajectory integration

**Usage:**
```python
from investsim.simulation import PathSimulator, SimulationParameters

params = SimulationParameters(
    initial_investment=100_000,
    monthly_contribution=5_000,
    years=33,
    simulations=1000,
)
sample = PathSimulator(n_workers=4).simulate(params, random_seed=42)
```
"""

from investsim.simulation.parameters import SimulationParameters
from investsim.simulation.simulator import PathSimulator, DEFAULT_CHUNK_SIZE

__all__ = [
    "SimulationParameters",
    "PathSimulator",
    "DEFAULT_CHUNK_SIZE",
]
