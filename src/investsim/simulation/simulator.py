"""
Monte Carlo path simulator for a single-asset savings plan.

Each trajectory starts at the initial investment and is integrated monthly:

    V_0 = initial_investment
    V_{t+1} = V_t · (1 + r_t) + contribution      # contribution after growth
    r_t ~ N(μ_m, σ_m²)  i.i.d.

Only the final value V_months of each trajectory is kept.

Trajectories never interact, so they are processed in fixed-size chunks.
Every chunk owns an independent random stream spawned from one
``SeedSequence``; the chunk layout depends only on ``chunk_size``, which makes
a seeded run reproduce exactly whatever the number of workers.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Union

import numpy as np
from numpy.typing import NDArray

from investsim.errors import SimulationCancelled, SimulationTimeout, ValidationError
from investsim.returns.box_muller import BoxMullerReturnModel
from investsim.simulation.parameters import SimulationParameters
from investsim.validation import require_integral

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 512
# Months between timeout / cancellation checks inside a chunk
INTERRUPT_CHECK_MONTHS = 64

SeedLike = Union[None, int, np.random.SeedSequence]


class PathSimulator:
    """
    Simulates independent portfolio trajectories and returns final values.

    Attributes
    ----------
    return_model : BoxMullerReturnModel
        Monthly return model. Any object exposing ``draw(rng, size)`` works.
    n_workers : int
        Number of worker threads. 1 runs chunks serially in the caller.
    chunk_size : int
        Trajectories per chunk (and per random stream).
    """

    def __init__(
        self,
        return_model: Optional[BoxMullerReturnModel] = None,
        n_workers: int = 1,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Initialize path simulator.

        Parameters
        ----------
        return_model : BoxMullerReturnModel, optional
            Return model. Defaults to 10% mean, 15% volatility.
        n_workers : int
            Worker threads. Default 1 (serial).
        chunk_size : int
            Trajectories per chunk. Default 512.
        """
        self.return_model = return_model if return_model is not None else BoxMullerReturnModel()
        self.n_workers = require_integral("n_workers", n_workers, 1)
        self.chunk_size = require_integral("chunk_size", chunk_size, 1)

    def simulate(
        self,
        params: SimulationParameters,
        random_seed: SeedLike = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> NDArray[np.float64]:
        """
        Run every trajectory and collect the final portfolio values.

        Parameters
        ----------
        params : SimulationParameters
            Validated run inputs.
        random_seed : int or np.random.SeedSequence, optional
            Root seed. None draws fresh OS entropy.
        timeout : float, optional
            Wall-clock budget in seconds, checked between chunks and
            every 64 months within a chunk.
        cancel_event : threading.Event, optional
            When set, the run stops at the next check.

        Returns
        -------
        sample : NDArray[np.float64]
            Final values, shape (simulations,), in trajectory order (unsorted).
            Values may be ±inf if a trajectory overflows.

        Raises
        ------
        SimulationTimeout
            If ``timeout`` elapses before all chunks complete.
        SimulationCancelled
            If ``cancel_event`` is set before all chunks complete.
        """
        if timeout is not None and timeout <= 0:
            raise ValidationError(f"timeout must be positive. Got {timeout}")

        seed_seq = (
            random_seed
            if isinstance(random_seed, np.random.SeedSequence)
            else np.random.SeedSequence(random_seed)
        )
        sizes = self._chunk_sizes(params.simulations)
        streams = seed_seq.spawn(len(sizes))
        deadline = None if timeout is None else time.monotonic() + timeout

        logger.debug(
            "Simulating %d trajectories x %d months in %d chunks (%d workers)",
            params.simulations, params.months, len(sizes), self.n_workers,
        )

        def run_chunk(index: int) -> NDArray[np.float64]:
            done = sum(sizes[:index])
            self._check_interrupt(deadline, cancel_event, done, params.simulations)
            rng = np.random.default_rng(streams[index])
            values = self._simulate_chunk(
                params, sizes[index], rng,
                interrupt=lambda: self._check_interrupt(
                    deadline, cancel_event, done, params.simulations
                ),
            )
            logger.debug("Chunk %d/%d finished (%d trajectories)", index + 1, len(sizes), sizes[index])
            return values

        if self.n_workers == 1 or len(sizes) == 1:
            chunks = [run_chunk(i) for i in range(len(sizes))]
        else:
            chunks = self._run_parallel(run_chunk, len(sizes))

        return np.concatenate(chunks)

    def _run_parallel(self, run_chunk, n_chunks: int) -> List[NDArray[np.float64]]:
        """Run chunks on a thread pool, preserving chunk order."""
        executor = ThreadPoolExecutor(
            max_workers=self.n_workers, thread_name_prefix="investsim-path"
        )
        futures = [executor.submit(run_chunk, i) for i in range(n_chunks)]
        try:
            return [future.result() for future in futures]
        finally:
            # Pending chunks are dropped if any chunk raised
            executor.shutdown(wait=True, cancel_futures=True)

    def _simulate_chunk(
        self,
        params: SimulationParameters,
        n_paths: int,
        rng: np.random.Generator,
        interrupt: Optional[Callable[[], None]] = None,
    ) -> NDArray[np.float64]:
        """
        Integrate ``n_paths`` trajectories over all months.

        ``interrupt`` is called every ``INTERRUPT_CHECK_MONTHS`` months and
        raises to abandon the chunk.
        """
        portfolio = np.full(n_paths, params.initial_investment, dtype=np.float64)
        contribution = params.monthly_contribution

        # Overflow to ±inf is kept in the sample rather than raised
        with np.errstate(over="ignore", invalid="ignore"):
            for month in range(params.months):
                if interrupt is not None and month and month % INTERRUPT_CHECK_MONTHS == 0:
                    interrupt()
                monthly_returns = self.return_model.draw(rng, n_paths)
                portfolio = portfolio * (1.0 + monthly_returns) + contribution

        return portfolio

    def _chunk_sizes(self, n_total: int) -> List[int]:
        full, remainder = divmod(n_total, self.chunk_size)
        sizes = [self.chunk_size] * full
        if remainder:
            sizes.append(remainder)
        return sizes

    @staticmethod
    def _check_interrupt(
        deadline: Optional[float],
        cancel_event: Optional[threading.Event],
        completed: int,
        requested: int,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Cancellation requested at trajectory %d/%d", completed, requested)
            raise SimulationCancelled(
                f"Simulation cancelled after {completed} of {requested} trajectories",
                completed, requested,
            )
        if deadline is not None and time.monotonic() > deadline:
            logger.info("Timeout reached at trajectory %d/%d", completed, requested)
            raise SimulationTimeout(
                f"Simulation timed out after {completed} of {requested} trajectories",
                completed, requested,
            )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PathSimulator(return_model={self.return_model!r}, "
            f"n_workers={self.n_workers}, chunk_size={self.chunk_size})"
        )
