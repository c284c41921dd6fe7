"""
Monte Carlo projection of a savings portfolio.

An initial lump sum grows under i.i.d. normal monthly returns (Box-Muller)
with a fixed contribution added after each month's growth. Many independent
trajectories are simulated and their final values summarized as
5th / 50th / 95th percentiles and a 20-bucket histogram.

**Usage:**
```python
from investsim import run_simulation

result = run_simulation(
    initial_investment=100_000,
    monthly_contribution=5_000,
    years=33,
    simulations=1000,
    random_seed=42,
)
print(result.stats.median)
print(result.to_dict()["histogram"][0])
```
"""

from investsim.analysis import ResultAggregator, Statistics, HistogramBucket, SampleSummary
from investsim.engine import SimulationResult, run_simulation
from investsim.errors import (
    InvestSimError,
    ValidationError,
    SimulationInterrupted,
    SimulationCancelled,
    SimulationTimeout,
)
from investsim.returns import BoxMullerReturnModel
from investsim.simulation import PathSimulator, SimulationParameters

__version__ = "0.1.0"

__all__ = [
    "run_simulation",
    "SimulationResult",
    "SimulationParameters",
    "PathSimulator",
    "BoxMullerReturnModel",
    "ResultAggregator",
    "Statistics",
    "HistogramBucket",
    "SampleSummary",
    "InvestSimError",
    "ValidationError",
    "SimulationInterrupted",
    "SimulationCancelled",
    "SimulationTimeout",
]
