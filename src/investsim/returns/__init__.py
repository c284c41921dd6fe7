"""
Return models for portfolio path simulation.

This module implements:
- Box-Muller generation of standard normal variates
- Monthly Gaussian returns derived from annual mean / volatility assumptions
"""

from investsim.returns.box_muller import (
    BoxMullerReturnModel,
    DEFAULT_ANNUAL_MEAN_RETURN,
    DEFAULT_ANNUAL_VOLATILITY,
    DEFAULT_PERIODS_PER_YEAR,
)

__all__ = [
    "BoxMullerReturnModel",
    "DEFAULT_ANNUAL_MEAN_RETURN",
    "DEFAULT_ANNUAL_VOLATILITY",
    "DEFAULT_PERIODS_PER_YEAR",
]
