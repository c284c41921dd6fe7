"""
Normally distributed monthly returns via the Box-Muller transform.

Annual assumptions are converted to a per-period (monthly) model:

    μ_m = μ_annual / 12
    σ_m = σ_annual / √12

and each monthly return is drawn as

    u1, u2 ~ U[0, 1)                         # independent uniforms
    z = √(-2 ln u1) · cos(2π u2)             # standard normal
    r = μ_m + σ_m · z

The transform is undefined at u1 = 0 (ln 0 = -∞). Such draws are resampled
in place, so a degenerate uniform never reaches a trajectory.
"""

from typing import Tuple, Union
import numpy as np
from numpy.typing import NDArray

from investsim.errors import ValidationError
from investsim.validation import require_finite_real, require_integral

DEFAULT_ANNUAL_MEAN_RETURN = 0.10
DEFAULT_ANNUAL_VOLATILITY = 0.15
DEFAULT_PERIODS_PER_YEAR = 12

Shape = Union[int, Tuple[int, ...]]


class BoxMullerReturnModel:
    """
    Gaussian monthly return model driven by the Box-Muller transform.

    The model holds no random state. Every draw takes an explicit
    ``numpy.random.Generator`` so that independent trajectories can own
    independent streams.

    Attributes
    ----------
    annual_mean_return : float
        Expected annual return (arithmetic), e.g. 0.10 for 10%.
    annual_volatility : float
        Annualized standard deviation of returns, e.g. 0.15 for 15%.
    periods_per_year : int
        Number of compounding periods per year (12 for monthly).
    """

    def __init__(
        self,
        annual_mean_return: float = DEFAULT_ANNUAL_MEAN_RETURN,
        annual_volatility: float = DEFAULT_ANNUAL_VOLATILITY,
        periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
    ) -> None:
        """
        Initialize return model.

        Parameters
        ----------
        annual_mean_return : float
            Expected annual return. Default 0.10.
        annual_volatility : float
            Annual volatility, must be >= 0. Default 0.15.
            A volatility of 0 gives a deterministic model.
        periods_per_year : int
            Periods per year. Default 12.

        Raises
        ------
        ValidationError
            If any assumption is non-finite or out of range.
        """
        annual_mean_return = require_finite_real("annual_mean_return", annual_mean_return)
        annual_volatility = require_finite_real("annual_volatility", annual_volatility)
        if annual_volatility < 0:
            raise ValidationError(
                f"annual_volatility must be >= 0. Got {annual_volatility}"
            )

        self.annual_mean_return = annual_mean_return
        self.annual_volatility = annual_volatility
        self.periods_per_year = require_integral("periods_per_year", periods_per_year, 1)

    @property
    def monthly_mean(self) -> float:
        """Per-period mean return."""
        return self.annual_mean_return / self.periods_per_year

    @property
    def monthly_std(self) -> float:
        """Per-period standard deviation (square-root-of-time scaling)."""
        return self.annual_volatility / np.sqrt(self.periods_per_year)

    def standard_normal(
        self,
        rng: np.random.Generator,
        size: Shape,
    ) -> NDArray[np.float64]:
        """
        Draw standard normal variates with the Box-Muller transform.

        Only the cosine branch is used, so each normal consumes two uniforms.

        Parameters
        ----------
        rng : np.random.Generator
            Source of uniform variates.
        size : int or tuple of int
            Output shape.

        Returns
        -------
        NDArray[np.float64]
            Standard normal samples of the requested shape.
        """
        u1 = rng.random(size)
        u2 = rng.random(size)

        # Generator.random samples [0, 1): zero is possible, one is not
        degenerate = u1 == 0.0
        while np.any(degenerate):
            u1[degenerate] = rng.random(int(np.count_nonzero(degenerate)))
            degenerate = u1 == 0.0

        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)

    def draw(
        self,
        rng: np.random.Generator,
        size: Shape,
    ) -> NDArray[np.float64]:
        """
        Draw monthly returns.

        Parameters
        ----------
        rng : np.random.Generator
            Source of randomness.
        size : int or tuple of int
            Output shape.

        Returns
        -------
        NDArray[np.float64]
            Monthly returns r = μ_m + σ_m · z.
        """
        z = self.standard_normal(rng, size)
        return z * self.monthly_std + self.monthly_mean

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"BoxMullerReturnModel(annual_mean_return={self.annual_mean_return}, "
            f"annual_volatility={self.annual_volatility}, "
            f"periods_per_year={self.periods_per_year})"
        )
