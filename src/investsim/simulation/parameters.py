"""Immutable inputs of a single simulation run."""

import math
from dataclasses import dataclass

from investsim.errors import ValidationError
from investsim.validation import require_finite_real, require_integral


@dataclass(frozen=True)
class SimulationParameters:
    """
    Inputs of one Monte Carlo run.

    Attributes
    ----------
    initial_investment : float
        Lump sum invested at month 0, must be >= 0.
    monthly_contribution : float
        Amount added after each month's growth. Negative values model
        withdrawals.
    years : float
        Investment horizon, must be >= 0. Fractional years are floored to
        whole months.
    simulations : int
        Number of independent trajectories, must be >= 1.
    """
    initial_investment: float
    monthly_contribution: float
    years: float
    simulations: int

    def __post_init__(self):
        initial = require_finite_real("initial_investment", self.initial_investment)
        if initial < 0:
            raise ValidationError(f"initial_investment must be >= 0. Got {initial}")
        contribution = require_finite_real("monthly_contribution", self.monthly_contribution)
        years = require_finite_real("years", self.years)
        if years < 0:
            raise ValidationError(f"years must be >= 0. Got {years}")
        simulations = require_integral("simulations", self.simulations, 1)

        object.__setattr__(self, "initial_investment", initial)
        object.__setattr__(self, "monthly_contribution", contribution)
        object.__setattr__(self, "years", years)
        object.__setattr__(self, "simulations", simulations)

    @property
    def months(self) -> int:
        """Number of monthly steps, ``floor(years * 12)``."""
        return int(math.floor(self.years * 12))

    @property
    def total_contributed(self) -> float:
        """Capital paid in over the horizon (initial plus all contributions)."""
        return self.initial_investment + self.monthly_contribution * self.months
