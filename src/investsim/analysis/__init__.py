"""
Aggregation of Monte Carlo samples for display.

**Key Classes:**
- ResultAggregator: percentiles, fixed-bucket histogram, sample summary
- Statistics / HistogramBucket / SampleSummary / AggregationResult: frozen results
"""

from investsim.analysis.aggregator import (
    ResultAggregator,
    nearest_rank,
    DEFAULT_N_BUCKETS,
    DEFAULT_PERCENTILES,
)
from investsim.analysis.formatting import format_millions, format_range_label
from investsim.analysis.results import (
    AggregationResult,
    HistogramBucket,
    SampleSummary,
    Statistics,
)

__all__ = [
    "ResultAggregator",
    "nearest_rank",
    "DEFAULT_N_BUCKETS",
    "DEFAULT_PERCENTILES",
    "format_millions",
    "format_range_label",
    "AggregationResult",
    "HistogramBucket",
    "SampleSummary",
    "Statistics",
]
