"""
Unit tests for result aggregation.

Tests cover:
- Nearest-rank percentiles and index clamping
- Fixed-size equal-width histogram and bucket boundaries
- Inclusive / half-open last bucket
- Zero-variance and non-finite samples
- Sample summary and range labels
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from investsim.analysis.aggregator import ResultAggregator, nearest_rank
from investsim.analysis.formatting import format_millions, format_range_label
from investsim.errors import ValidationError


def counts_of(histogram):
    return [bucket.count for bucket in histogram]


class TestNearestRank:
    """Tests for nearest-rank percentile lookup."""

    def test_index_is_floor_of_p_times_n(self) -> None:
        sample = np.arange(1000, dtype=np.float64)
        assert nearest_rank(sample, 0.05) == 50.0
        assert nearest_rank(sample, 0.5) == 500.0
        assert nearest_rank(sample, 0.95) == 950.0

    def test_index_clamped_at_upper_end(self) -> None:
        sample = np.array([1.0, 2.0, 3.0])
        assert nearest_rank(sample, 1.0) == 3.0

    def test_lower_end(self) -> None:
        sample = np.array([1.0, 2.0, 3.0])
        assert nearest_rank(sample, 0.0) == 1.0

    def test_small_sample(self) -> None:
        sample = np.array([10.0, 20.0])
        # floor(0.05 * 2) = 0, floor(0.5 * 2) = 1, floor(0.95 * 2) = 1
        assert nearest_rank(sample, 0.05) == 10.0
        assert nearest_rank(sample, 0.5) == 20.0
        assert nearest_rank(sample, 0.95) == 20.0


class TestStatistics:
    """Tests for the percentile statistics of a sample."""

    def test_unsorted_input(self) -> None:
        rng = np.random.default_rng(0)
        sample = rng.permutation(np.arange(1000, dtype=np.float64))

        stats = ResultAggregator().aggregate(sample).stats

        assert (stats.min, stats.median, stats.max) == (50.0, 500.0, 950.0)

    def test_ordering_holds(self) -> None:
        rng = np.random.default_rng(4)
        for n in (1, 2, 3, 19, 20, 21, 500):
            stats = ResultAggregator().aggregate(rng.lognormal(size=n)).stats
            assert stats.min <= stats.median <= stats.max

    def test_single_value(self) -> None:
        stats = ResultAggregator().aggregate([42.0]).stats
        assert stats.min == stats.median == stats.max == 42.0

    def test_custom_percentiles(self) -> None:
        aggregator = ResultAggregator(percentiles=(0.1, 0.5, 0.9))
        stats = aggregator.aggregate(np.arange(100.0)).stats
        assert (stats.min, stats.median, stats.max) == (10.0, 50.0, 90.0)

    def test_input_not_mutated(self) -> None:
        sample = np.array([3.0, 1.0, 2.0])
        ResultAggregator().aggregate(sample)
        assert_array_equal(sample, [3.0, 1.0, 2.0])


class TestHistogram:
    """Tests for histogram construction."""

    def test_always_twenty_buckets(self) -> None:
        for n in (1, 5, 20, 1000):
            sample = np.random.default_rng(n).normal(size=n)
            assert len(ResultAggregator().aggregate(sample).histogram) == 20

    def test_counts_sum_to_sample_size(self) -> None:
        sample = np.random.default_rng(1).lognormal(mean=14, sigma=0.6, size=1000)
        histogram = ResultAggregator().aggregate(sample).histogram
        assert sum(counts_of(histogram)) == 1000

    def test_equal_width_boundaries(self) -> None:
        histogram = ResultAggregator().aggregate(np.arange(101.0)).histogram

        lowers = np.array([b.lower for b in histogram])
        uppers = np.array([b.upper for b in histogram])
        assert_allclose(lowers, np.arange(20) * 5.0)
        assert_allclose(uppers, (np.arange(20) + 1) * 5.0)

    def test_half_open_buckets_and_inclusive_maximum(self) -> None:
        """Values on an interior edge go to the upper bucket; the max is kept."""
        histogram = ResultAggregator().aggregate(np.arange(101.0)).histogram
        counts = counts_of(histogram)

        assert counts[0] == 5    # 0..4
        assert counts[1] == 5    # 5..9
        assert counts[-1] == 6   # 95..100, 100 included
        assert sum(counts) == 101

    def test_exclusive_maximum_compatibility(self) -> None:
        """include_maximum=False leaves the sample maximum uncounted."""
        aggregator = ResultAggregator(include_maximum=False)
        counts = counts_of(aggregator.aggregate(np.arange(101.0)).histogram)

        assert counts[-1] == 5
        assert sum(counts) == 100

    def test_exclusive_maximum_drops_every_tie(self) -> None:
        aggregator = ResultAggregator(include_maximum=False)
        counts = counts_of(aggregator.aggregate([0.0, 1.0, 10.0, 10.0]).histogram)
        assert sum(counts) == 2

    def test_zero_variance_sample(self) -> None:
        """All mass goes to the first bucket; no division by zero."""
        histogram = ResultAggregator().aggregate(np.full(5, 7.0)).histogram

        assert len(histogram) == 20
        assert counts_of(histogram) == [5] + [0] * 19
        assert all(b.lower == b.upper == 7.0 for b in histogram)

    def test_single_trajectory_has_one_nonzero_bucket(self) -> None:
        histogram = ResultAggregator().aggregate([123_456.0]).histogram
        nonzero = [b for b in histogram if b.count > 0]
        assert len(nonzero) == 1
        assert nonzero[0].count == 1

    def test_custom_bucket_count(self) -> None:
        histogram = ResultAggregator(n_buckets=5).aggregate(np.arange(10.0)).histogram
        assert counts_of(histogram) == [2, 2, 2, 2, 2]

    def test_labels_in_millions(self) -> None:
        histogram = ResultAggregator().aggregate([0.0, 2_000_000.0]).histogram
        assert histogram[0].range_label == "0.0M-0.1M"
        assert histogram[-1].range_label == "1.9M-2.0M"


class TestNonFiniteSamples:
    """Tests for overflowed (±inf) and NaN values."""

    def test_positive_infinity_is_maximal(self) -> None:
        result = ResultAggregator().aggregate([3.0, np.inf, 1.0, 2.0])

        assert result.stats.max == np.inf
        assert result.stats.min == 1.0
        histogram = result.histogram
        assert histogram[0].lower == 1.0
        assert histogram[-1].upper == 3.0
        assert histogram[-1].count == 2     # 3.0 and +inf
        assert sum(counts_of(histogram)) == 4

    def test_negative_infinity_in_first_bucket(self) -> None:
        histogram = ResultAggregator().aggregate([-np.inf, 1.0, 2.0]).histogram
        assert histogram[0].count == 2
        assert sum(counts_of(histogram)) == 3

    def test_infinity_dropped_when_maximum_exclusive(self) -> None:
        aggregator = ResultAggregator(include_maximum=False)
        counts = counts_of(aggregator.aggregate([1.0, 2.0, 3.0, np.inf]).histogram)
        assert sum(counts) == 3

    def test_nan_excluded_from_histogram(self) -> None:
        result = ResultAggregator().aggregate([1.0, np.nan, 2.0])
        assert sum(counts_of(result.histogram)) == 2
        assert result.summary.n_non_finite == 1
        assert result.summary.n_finite == 2

    def test_all_infinite(self) -> None:
        histogram = ResultAggregator().aggregate([np.inf, np.inf]).histogram
        assert len(histogram) == 20
        assert histogram[-1].count == 2
        assert all(b.range_label == "n/a" for b in histogram)

    def test_warning_logged(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="investsim.analysis.aggregator"):
            ResultAggregator().aggregate([1.0, np.inf])
        assert "non-finite" in caplog.text

    def test_range_wider_than_float_max(self) -> None:
        result = ResultAggregator().aggregate([-1e308, 0.0, 1e308])
        histogram = result.histogram

        assert len(histogram) == 20
        assert histogram[0].lower == -1e308
        assert histogram[-1].upper == 1e308
        assert all(np.isfinite([b.lower for b in histogram]))
        assert all(np.isfinite([b.upper for b in histogram]))
        counts = counts_of(histogram)
        assert sum(counts) == 3
        assert counts[0] == counts[10] == counts[-1] == 1
        assert histogram[10].lower == 0.0
        assert result.stats.median == 0.0


class TestSummary:
    """Tests for sample moments and probability of loss."""

    def test_moments(self) -> None:
        summary = ResultAggregator().aggregate([1.0, 2.0, 3.0, 4.0]).summary
        assert_allclose(summary.mean, 2.5)
        assert_allclose(summary.std, np.sqrt(1.25))
        assert_allclose(summary.skewness, 0.0, atol=1e-12)
        assert summary.n_finite == 4
        assert summary.n_non_finite == 0

    def test_zero_variance_moments(self) -> None:
        summary = ResultAggregator().aggregate([5.0, 5.0, 5.0]).summary
        assert summary.std == 0.0
        assert summary.skewness == 0.0
        assert summary.kurtosis == 0.0

    def test_probability_of_loss(self) -> None:
        summary = ResultAggregator().aggregate([1.0, 2.0, 3.0, 4.0], total_contributed=2.5).summary
        assert summary.total_contributed == 2.5
        assert summary.probability_of_loss == 0.5

    def test_probability_of_loss_absent_without_contributions(self) -> None:
        summary = ResultAggregator().aggregate([1.0, 2.0]).summary
        assert summary.probability_of_loss is None


class TestAggregatorContract:
    """Tests for validation, purity and output structure."""

    def test_empty_sample_raises_error(self) -> None:
        with pytest.raises(ValidationError, match="at least one"):
            ResultAggregator().aggregate([])

    def test_two_dimensional_sample_raises_error(self) -> None:
        with pytest.raises(ValidationError, match="one-dimensional"):
            ResultAggregator().aggregate(np.zeros((2, 2)))

    def test_invalid_configuration(self) -> None:
        with pytest.raises(ValidationError, match="n_buckets"):
            ResultAggregator(n_buckets=0)
        with pytest.raises(ValidationError, match="exactly 3"):
            ResultAggregator(percentiles=(0.5, 0.9))
        with pytest.raises(ValidationError, match="non-decreasing"):
            ResultAggregator(percentiles=(0.9, 0.5, 0.1))
        with pytest.raises(ValidationError, match="non-decreasing"):
            ResultAggregator(percentiles=(0.1, 0.5, 1.5))

    def test_idempotent(self) -> None:
        sample = np.random.default_rng(8).lognormal(size=300)
        aggregator = ResultAggregator()
        assert aggregator.aggregate(sample) == aggregator.aggregate(sample)

    def test_sorted_sample_is_read_only_copy(self) -> None:
        sample = np.array([3.0, 1.0, 2.0])
        result = ResultAggregator().aggregate(sample)

        assert_array_equal(result.sorted_sample, [1.0, 2.0, 3.0])
        assert_array_equal(sample, [3.0, 1.0, 2.0])
        with pytest.raises(ValueError):
            result.sorted_sample[0] = 0.0

    def test_to_dict(self) -> None:
        result = ResultAggregator().aggregate(np.arange(40.0) * 100_000)
        payload = result.to_dict()

        assert set(payload) == {"stats", "histogram"}
        assert set(payload["stats"]) == {"min", "median", "max"}
        assert len(payload["histogram"]) == 20
        assert set(payload["histogram"][0]) == {"rangeLabel", "count"}
        assert sum(b["count"] for b in payload["histogram"]) == 40

    def test_repr(self) -> None:
        assert "n_buckets=20" in repr(ResultAggregator())


class TestFormatting:
    """Tests for range labels."""

    def test_format_millions(self) -> None:
        assert format_millions(2_345_678) == "2.3M"
        assert format_millions(0.0) == "0.0M"
        assert format_millions(float("inf")) == "inf"
        assert format_millions(float("-inf")) == "-inf"
        assert format_millions(float("nan")) == "n/a"

    def test_format_range_label(self) -> None:
        assert format_range_label(1_200_000, 1_500_000) == "1.2M-1.5M"
