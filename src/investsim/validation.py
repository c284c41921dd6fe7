"""Scalar argument checks shared by the parameter objects."""

import math
import numbers

from investsim.errors import ValidationError


def require_finite_real(name: str, value) -> float:
    """Return ``value`` as a float, rejecting bools, non-numbers, NaN and ±inf."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name} must be a real number. Got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite. Got {value}")
    return value


def require_integral(name: str, value, minimum: int) -> int:
    """
    Return ``value`` as an int.

    Integral floats such as ``1000.0`` are accepted; ``2.5`` is rejected,
    never rounded.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name} must be an integer. Got {value!r}")
    if not isinstance(value, numbers.Integral):
        if not math.isfinite(value) or not float(value).is_integer():
            raise ValidationError(f"{name} must be an integer. Got {value!r}")
    value = int(value)
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}. Got {value}")
    return value
