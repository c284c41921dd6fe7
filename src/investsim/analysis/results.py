"""Read-only result containers produced by the aggregator."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Statistics:
    """Nearest-rank percentiles of the final values (5th, 50th, 95th)."""
    min: float
    median: float
    max: float

    def to_dict(self) -> dict:
        return {"min": self.min, "median": self.median, "max": self.max}


@dataclass(frozen=True)
class HistogramBucket:
    """One equal-width interval of the histogram and its count."""
    lower: float
    upper: float
    count: int
    range_label: str

    def to_dict(self) -> dict:
        return {"rangeLabel": self.range_label, "count": self.count}


@dataclass(frozen=True)
class SampleSummary:
    """
    Moments and capital-at-risk figures of a sample.

    Moments are taken over finite values only. ``probability_of_loss`` is
    None when the aggregator was not told how much capital was paid in.
    """
    mean: float
    std: float
    skewness: float
    kurtosis: float
    n_finite: int
    n_non_finite: int
    total_contributed: Optional[float] = None
    probability_of_loss: Optional[float] = None


@dataclass(frozen=True)
class AggregationResult:
    """
    Everything derived from one sorted sample.

    ``sorted_sample`` is the read-only sorted copy the figures were taken
    from. It is left out of equality and repr.
    """
    stats: Statistics
    histogram: Tuple[HistogramBucket, ...]
    summary: SampleSummary
    sorted_sample: Optional[NDArray[np.float64]] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        """Structure consumed by the presentation layer."""
        return {
            "stats": self.stats.to_dict(),
            "histogram": [bucket.to_dict() for bucket in self.histogram],
        }
