"""
Aggregation of simulated final values into display statistics.

Given the sample of final portfolio values this module computes:
- Nearest-rank percentiles: sorted[floor(p · n)], clamped to [0, n - 1]
- A fixed-size histogram of equal-width buckets over [min(sample), max(sample)]
- Sample moments and the probability of ending below the capital paid in

Histogram buckets are half-open, [lower, upper), except the last one, whose
upper bound is inclusive so that the sample maximum is counted and bucket
counts sum to the sample size. ``include_maximum=False`` restores the
half-open last bucket, which leaves values equal to the maximum uncounted.

Non-finite values are tolerated: ±inf sort to the ends and are counted in the
first / last bucket, while the bucket edges span the finite values only. NaN
values sort last and are left out of the histogram.
"""

import logging
import math
import warnings
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.stats import describe

from investsim.analysis.formatting import format_range_label
from investsim.analysis.results import (
    AggregationResult,
    HistogramBucket,
    SampleSummary,
    Statistics,
)
from investsim.errors import ValidationError
from investsim.validation import require_integral

logger = logging.getLogger(__name__)

DEFAULT_N_BUCKETS = 20
DEFAULT_PERCENTILES = (0.05, 0.5, 0.95)


def nearest_rank(sorted_sample: NDArray[np.float64], p: float) -> float:
    """
    Nearest-rank percentile of an ascending sample.

    Parameters
    ----------
    sorted_sample : NDArray[np.float64]
        Non-empty sample sorted ascending.
    p : float
        Quantile level in [0, 1].

    Returns
    -------
    float
        ``sorted_sample[floor(p * n)]``, with the index clamped to the sample.
    """
    n = sorted_sample.shape[0]
    index = min(max(int(math.floor(p * n)), 0), n - 1)
    return float(sorted_sample[index])


def bucket_edges(lo: float, hi: float, n: int) -> NDArray[np.float64]:
    """
    ``n + 1`` equal-width edges from ``lo`` to ``hi``, both finite, ``lo < hi``.

    When ``hi - lo`` overflows the edges are interpolated between the two
    ends instead, so every edge stays finite. The end edges are always
    exactly ``lo`` and ``hi``.
    """
    with np.errstate(over="ignore", invalid="ignore"):
        width = (hi - lo) / n
    if np.isfinite(width):
        edges = lo + np.arange(n + 1) * width
    else:
        t = np.arange(n + 1) / n
        edges = lo * (1.0 - t) + hi * t
    edges[0] = lo
    edges[-1] = hi
    return np.maximum.accumulate(edges)


class ResultAggregator:
    """
    Turns a sample of final values into statistics and a histogram.

    Attributes
    ----------
    n_buckets : int
        Number of histogram buckets. Always the length of the histogram.
    percentiles : Tuple[float, float, float]
        Quantile levels reported as (min, median, max).
    include_maximum : bool
        Whether the last bucket's upper bound is inclusive.
    """

    def __init__(
        self,
        n_buckets: int = DEFAULT_N_BUCKETS,
        percentiles: Sequence[float] = DEFAULT_PERCENTILES,
        include_maximum: bool = True,
    ) -> None:
        """
        Initialize aggregator.

        Parameters
        ----------
        n_buckets : int
            Histogram size. Default 20.
        percentiles : sequence of 3 floats
            Non-decreasing levels in [0, 1]. Default (0.05, 0.5, 0.95).
        include_maximum : bool
            Count the sample maximum in the last bucket. Default True.
        """
        self.n_buckets = require_integral("n_buckets", n_buckets, 1)

        percentiles = tuple(float(p) for p in percentiles)
        if len(percentiles) != 3:
            raise ValidationError(
                f"percentiles must hold exactly 3 levels. Got {percentiles}"
            )
        if not all(0.0 <= p <= 1.0 for p in percentiles) or list(percentiles) != sorted(percentiles):
            raise ValidationError(
                f"percentiles must be non-decreasing levels in [0, 1]. Got {percentiles}"
            )
        self.percentiles: Tuple[float, float, float] = percentiles
        self.include_maximum = include_maximum

    def aggregate(
        self,
        sample: ArrayLike,
        total_contributed: Optional[float] = None,
    ) -> AggregationResult:
        """
        Aggregate a sample of final portfolio values.

        The input is copied before sorting and is never modified. The sorted
        copy is returned read-only as ``sorted_sample``.

        Parameters
        ----------
        sample : array_like
            One-dimensional, non-empty sample of final values.
        total_contributed : float, optional
            Capital paid in over the horizon. Enables
            ``summary.probability_of_loss``.

        Returns
        -------
        AggregationResult
            Percentile statistics, histogram and sample summary.

        Raises
        ------
        ValidationError
            If the sample is empty or not one-dimensional.
        """
        values = np.asarray(sample, dtype=np.float64)
        if values.ndim != 1:
            raise ValidationError(f"sample must be one-dimensional. Got shape {values.shape}")
        if values.shape[0] == 0:
            raise ValidationError("sample must contain at least one value")

        sorted_values = np.sort(values)
        sorted_values.flags.writeable = False

        n_non_finite = int(np.count_nonzero(~np.isfinite(sorted_values)))
        if n_non_finite:
            logger.warning(
                "%d of %d values are non-finite (overflowed trajectories)",
                n_non_finite, sorted_values.shape[0],
            )

        stats = Statistics(*(nearest_rank(sorted_values, p) for p in self.percentiles))
        histogram = self.histogram(sorted_values)
        summary = self.summarize(sorted_values, total_contributed)

        return AggregationResult(
            stats=stats, histogram=histogram, summary=summary, sorted_sample=sorted_values
        )

    def histogram(self, sorted_values: NDArray[np.float64]) -> Tuple[HistogramBucket, ...]:
        """
        Equal-width histogram over the finite range of an ascending sample.

        A zero-width range (all finite values equal) puts every finite value
        in the first bucket; the remaining buckets are empty and collapsed
        onto the same value.

        Parameters
        ----------
        sorted_values : NDArray[np.float64]
            Sample sorted ascending.

        Returns
        -------
        Tuple[HistogramBucket, ...]
            Exactly ``n_buckets`` buckets in ascending order.
        """
        n = self.n_buckets
        finite = sorted_values[np.isfinite(sorted_values)]
        n_neg_inf = int(np.count_nonzero(sorted_values == -np.inf))
        n_pos_inf = int(np.count_nonzero(sorted_values == np.inf))

        counts = np.zeros(n, dtype=np.int64)
        if finite.shape[0] == 0:
            edges = np.full(n + 1, np.nan)
        elif finite[0] == finite[-1]:
            edges = np.full(n + 1, finite[0])
            counts[0] = finite.shape[0]
        else:
            lo, hi = finite[0], finite[-1]
            edges = bucket_edges(lo, hi, n)
            # np.histogram closes the last bin on the right
            counts, _ = np.histogram(finite, bins=edges)
            counts = counts.astype(np.int64)

            if not self.include_maximum:
                if n_pos_inf:
                    n_pos_inf = 0
                else:
                    counts[-1] -= int(np.count_nonzero(finite == hi))

        counts[0] += n_neg_inf
        counts[-1] += n_pos_inf

        buckets = []
        for i in range(n):
            lower, upper = float(edges[i]), float(edges[i + 1])
            label = "n/a" if math.isnan(lower) else format_range_label(lower, upper)
            buckets.append(HistogramBucket(lower=lower, upper=upper, count=int(counts[i]), range_label=label))

        return tuple(buckets)

    def summarize(
        self,
        sorted_values: NDArray[np.float64],
        total_contributed: Optional[float] = None,
    ) -> SampleSummary:
        """
        Moments of the finite values plus the probability of loss.

        Skewness and excess kurtosis are reported as 0 for a zero-variance
        sample, and every moment is NaN when no value is finite.
        """
        n_total = sorted_values.shape[0]
        finite = sorted_values[np.isfinite(sorted_values)]

        if finite.shape[0]:
            with warnings.catch_warnings(), np.errstate(all="ignore"):
                warnings.simplefilter("ignore", RuntimeWarning)
                desc = describe(finite, ddof=0)
            variance = float(desc.variance)
            mean = float(desc.mean)
            std = math.sqrt(variance) if variance >= 0 else math.nan
            if variance > 0:
                skewness, kurtosis = float(desc.skewness), float(desc.kurtosis)
            else:
                skewness, kurtosis = 0.0, 0.0
        else:
            mean = std = skewness = kurtosis = math.nan

        probability_of_loss = None
        if total_contributed is not None:
            total_contributed = float(total_contributed)
            below = np.count_nonzero(sorted_values < total_contributed)
            probability_of_loss = float(below) / n_total

        return SampleSummary(
            mean=mean,
            std=std,
            skewness=skewness,
            kurtosis=kurtosis,
            n_finite=int(finite.shape[0]),
            n_non_finite=n_total - int(finite.shape[0]),
            total_contributed=total_contributed,
            probability_of_loss=probability_of_loss,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ResultAggregator(n_buckets={self.n_buckets}, percentiles={self.percentiles}, "
            f"include_maximum={self.include_maximum})"
        )
