"""Histogram range labels (display only)."""

import math


def format_millions(value: float) -> str:
    """Scale to millions with one decimal, e.g. 2_345_678 -> '2.3M'."""
    if math.isnan(value):
        return "n/a"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value / 1_000_000:.1f}M"


def format_range_label(lower: float, upper: float) -> str:
    """Label for a bucket spanning ``[lower, upper)``, e.g. '1.2M-1.5M'."""
    return f"{format_millions(lower)}-{format_millions(upper)}"
