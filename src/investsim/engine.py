"""
Single-call entry point: parameters in, immutable result out.

    result = run_simulation(100_000, 5_000, years=33, simulations=1000, random_seed=7)
    result.stats.median
    result.to_dict()   # {"stats": {...}, "histogram": [{"rangeLabel", "count"}, ...]}
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from investsim.analysis.aggregator import ResultAggregator
from investsim.analysis.results import HistogramBucket, SampleSummary, Statistics
from investsim.returns.box_muller import BoxMullerReturnModel
from investsim.simulation.parameters import SimulationParameters
from investsim.simulation.simulator import DEFAULT_CHUNK_SIZE, PathSimulator, SeedLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of one run.

    ``sample`` is the sorted, read-only array of final values. It is left out
    of equality and repr.
    """
    parameters: SimulationParameters
    stats: Statistics
    histogram: Tuple[HistogramBucket, ...]
    summary: SampleSummary
    sample: NDArray[np.float64] = field(compare=False, repr=False)

    def to_dict(self) -> dict:
        """Structure consumed by the presentation layer."""
        return {
            "stats": self.stats.to_dict(),
            "histogram": [bucket.to_dict() for bucket in self.histogram],
        }


def run_simulation(
    initial_investment: float,
    monthly_contribution: float,
    years: float,
    simulations: int,
    *,
    assumptions: Optional[BoxMullerReturnModel] = None,
    aggregator: Optional[ResultAggregator] = None,
    random_seed: SeedLike = None,
    n_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResult:
    """
    Validate inputs, simulate every trajectory and aggregate the outcome.

    Parameters
    ----------
    initial_investment, monthly_contribution, years, simulations
        See ``SimulationParameters``.
    assumptions : BoxMullerReturnModel, optional
        Return model. Default 10% mean, 15% volatility.
    aggregator : ResultAggregator, optional
        Aggregation settings. Default 20 buckets, 5/50/95 percentiles.
    random_seed : int or np.random.SeedSequence, optional
        Root seed for reproducible runs.
    n_workers : int
        Worker threads for trajectory chunks. Default 1.
    chunk_size : int
        Trajectories per chunk.
    timeout : float, optional
        Time budget in seconds.
    cancel_event : threading.Event, optional
        Cooperative cancellation flag.

    Returns
    -------
    SimulationResult

    Raises
    ------
    ValidationError
        If any input is invalid. Raised before any trajectory runs.
    SimulationInterrupted
        If the run is cancelled or times out.
    """
    params = SimulationParameters(
        initial_investment=initial_investment,
        monthly_contribution=monthly_contribution,
        years=years,
        simulations=simulations,
    )
    simulator = PathSimulator(return_model=assumptions, n_workers=n_workers, chunk_size=chunk_size)
    aggregator = aggregator if aggregator is not None else ResultAggregator()

    start = time.perf_counter()
    sample = simulator.simulate(
        params, random_seed=random_seed, timeout=timeout, cancel_event=cancel_event
    )
    aggregated = aggregator.aggregate(sample, total_contributed=params.total_contributed)
    elapsed = time.perf_counter() - start

    logger.info(
        "Simulated %d trajectories over %d months in %.3fs: p5=%.2f median=%.2f p95=%.2f",
        params.simulations, params.months, elapsed,
        aggregated.stats.min, aggregated.stats.median, aggregated.stats.max,
    )

    return SimulationResult(
        parameters=params,
        stats=aggregated.stats,
        histogram=aggregated.histogram,
        summary=aggregated.summary,
        sample=aggregated.sorted_sample,
    )
