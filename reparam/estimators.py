# estimators.py
"""
Closed-form estimators for a Bernoulli success probability.

With outcomes y_1..y_N in {0, 1}, s = sum(y), and a Beta(prior_a, prior_b)
prior, the posterior is Beta(prior_a + s, prior_b + N - s). Under the
uniform Beta(1, 1) prior its mode equals the maximum likelihood estimate
s / N, while its mean (s + 1) / (N + 2) does not.

Re-expressing theta on the log-odds scale alpha = logit(theta) multiplies
the density by the Jacobian theta * (1 - theta). The posterior over alpha
is then proportional to theta**a * (1 - theta)**b, whose maximum sits at
theta = a / (a + b): the Beta mean, not the Beta mode. Maximum likelihood
estimates do not move under reparameterization; posterior modes do.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import stats

from .custom_types import Array, ArrayLike
from .array_backend.utils import _as_array, _ensure_real_scalar
from .errors import BoundaryModeError, DomainError, InvalidInputError
from .transforms import logit

__all__ = [
    "PointEstimate",
    "validate_outcomes",
    "mle_bernoulli",
    "beta_posterior_params",
    "beta_mean",
    "beta_mode",
    "beta_variance",
    "beta_credible_interval",
    "beta_logodds_mode",
]


@dataclass(frozen=True)
class PointEstimate:
    """A (mode, mean) summary of a distribution over one parameter.

    `mode` is None when the distribution has no interior mode.
    """
    mode: Optional[float]
    mean: float


def validate_outcomes(outcomes: ArrayLike) -> Array:
    """Return `outcomes` as a 1-D int array of zeros and ones.

    Raises:
        InvalidInputError: If the sequence is empty, not one-dimensional, or
            contains anything other than 0 and 1.
    """
    try:
        arr = _as_array(outcomes)
    except TypeError as e:
        raise InvalidInputError("outcomes", str(e)) from e
    if arr.ndim != 1:
        raise InvalidInputError("outcomes", f"expected a 1-D sequence; got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidInputError("outcomes", "sequence is empty")
    if arr.dtype.kind not in "biuf":
        raise InvalidInputError("outcomes", f"expected numeric 0/1 values; got dtype {arr.dtype}")
    if not np.all((arr == 0) | (arr == 1)):
        bad = arr[(arr != 0) & (arr != 1)][0]
        raise InvalidInputError("outcomes", f"values must be 0 or 1; found {bad!r}")
    return arr.astype(int)


def _positive_scalar(x, name: str) -> float:
    try:
        v = float(_ensure_real_scalar(x))
    except (TypeError, ValueError) as e:
        raise DomainError(name, x, f"{name} a real scalar") from e
    if not (np.isfinite(v) and v > 0.0):
        raise DomainError(name, x, f"0 < {name} < inf")
    return v


def mle_bernoulli(outcomes: ArrayLike) -> float:
    """Maximum likelihood estimate sum(outcomes) / len(outcomes)."""
    y = validate_outcomes(outcomes)
    return float(y.sum()) / y.size


def beta_posterior_params(outcomes: ArrayLike, prior_a: float = 1, prior_b: float = 1) -> Tuple[float, float]:
    """Conjugate update of a Beta(prior_a, prior_b) prior.

    Returns:
        (prior_a + successes, prior_b + failures)

    Raises:
        DomainError: If a prior hyperparameter is not a positive finite number.
        InvalidInputError: If `outcomes` is not a valid trial sequence.
    """
    a0 = _positive_scalar(prior_a, "prior_a")
    b0 = _positive_scalar(prior_b, "prior_b")
    y = validate_outcomes(outcomes)
    s = int(y.sum())
    return a0 + s, b0 + (y.size - s)


def beta_mean(a: float, b: float) -> float:
    """Mean a / (a + b) of Beta(a, b)."""
    a = _positive_scalar(a, "a")
    b = _positive_scalar(b, "b")
    return a / (a + b)


def beta_mode(a: float, b: float) -> float:
    """Interior mode (a - 1) / (a + b - 2) of Beta(a, b).

    Raises:
        DomainError: If a or b is not positive.
        BoundaryModeError: If a <= 1 or b <= 1. Its `location` is 0.0 when
            the density is largest at 0 (a <= 1 <= b), 1.0 when it is
            largest at 1 (b <= 1 <= a), and None for the uniform Beta(1, 1)
            and for the U-shaped a < 1, b < 1 case.
    """
    a = _positive_scalar(a, "a")
    b = _positive_scalar(b, "b")
    if a > 1.0 and b > 1.0:
        return (a - 1.0) / (a + b - 2.0)

    if a == 1.0 and b == 1.0:
        location = None
    elif a <= 1.0 <= b:
        location = 0.0
    elif b <= 1.0 <= a:
        location = 1.0
    else:
        location = None
    raise BoundaryModeError(a, b, location)


def beta_variance(a: float, b: float) -> float:
    """Variance a b / ((a + b)^2 (a + b + 1)) of Beta(a, b)."""
    a = _positive_scalar(a, "a")
    b = _positive_scalar(b, "b")
    s = a + b
    return (a * b) / (s * s * (s + 1.0))


def beta_credible_interval(a: float, b: float, level: float = 0.90) -> Tuple[float, float]:
    """Equal-tailed credible interval of Beta(a, b)."""
    a = _positive_scalar(a, "a")
    b = _positive_scalar(b, "b")
    level = float(level)
    if not 0.0 < level < 1.0:
        raise DomainError("level", level, "0 < level < 1")
    tail = 0.5 * (1.0 - level)
    lo, hi = stats.beta.ppf([tail, 1.0 - tail], a, b)
    return float(lo), float(hi)


def beta_logodds_mode(a: float, b: float) -> float:
    """Mode of alpha = logit(theta) for theta ~ Beta(a, b), Jacobian included.

    The density of alpha is proportional to theta**a * (1 - theta)**b, so
    the mode is logit(a / (a + b)) for every a, b > 0.
    """
    return logit(beta_mean(a, b))
