# transforms.py
"""
Log-odds transforms and the logistic distribution.

Every function accepts a scalar or an array-like. Scalars come back as Python
floats, arrays as float ndarrays of the same shape. Inputs outside a
function's domain raise `DomainError`; nothing here returns NaN or an
infinity for a valid input.

The three representations of a success probability are related by

    theta in (0, 1)  <->  odds = theta / (1 - theta) in (0, inf)
                     <->  alpha = logit(theta) = log(odds) in R

and the density of alpha = logit(theta) for theta ~ Uniform(0, 1) is the
standard logistic density, which is also the Jacobian |d theta / d alpha|
of the inverse transform.
"""
from __future__ import annotations

import numpy as np

from .custom_types import Array, ArrayLike
from .array_backend.utils import _as_float_array, _like_input
from .errors import DomainError

__all__ = [
    "logit",
    "inv_logit",
    "logistic_pdf",
    "logistic_cdf",
    "log_logistic_pdf",
    "log_inv_logit",
    "log1m_inv_logit",
    "odds",
]

# Largest double strictly below one, and smallest positive normal double.
_ONE_BELOW = np.nextafter(1.0, 0.0)
_TINY = np.finfo(float).tiny


def _offending(arr: Array, bad: Array):
    """First rejected element, for error messages."""
    return arr[bad].flat[0].item() if arr.ndim else arr.item()


def _require_open_unit(arr: Array, name: str) -> None:
    # written so that NaN fails the check
    bad = ~((arr > 0.0) & (arr < 1.0))
    if np.any(bad):
        raise DomainError(name, _offending(arr, bad), f"0 < {name} < 1")


def _require_finite(arr: Array, name: str) -> None:
    bad = ~np.isfinite(arr)
    if np.any(bad):
        raise DomainError(name, _offending(arr, bad), f"{name} finite")


def _expit(a: Array) -> Array:
    # exp(-|a|) lies in (0, 1], so neither branch can overflow
    e = np.exp(-np.abs(a))
    return np.where(a >= 0.0, 1.0 / (1.0 + e), e / (1.0 + e))


def _log_expit(a: Array) -> Array:
    return np.minimum(a, 0.0) - np.log1p(np.exp(-np.abs(a)))


def logit(theta: ArrayLike) -> float | Array:
    """Log-odds log(theta / (1 - theta)).

    Args:
        theta: Probability (or array of probabilities) in the open interval (0, 1).

    Returns:
        The log-odds, same shape as the input.

    Raises:
        DomainError: If any element is <= 0, >= 1 or NaN. The endpoints map
            to -inf / +inf and are rejected rather than returned.
    """
    arr, is_scalar = _as_float_array(theta)
    _require_open_unit(arr, "theta")
    return _like_input(np.log(arr) - np.log1p(-arr), is_scalar)


def inv_logit(alpha: ArrayLike) -> float | Array:
    """Logistic sigmoid 1 / (1 + exp(-alpha)), the inverse of `logit`.

    Evaluated on the sign of `alpha` so that large negative inputs do not
    overflow. The result is clipped into [tiny, 1 - 2**-53], so it is
    strictly inside (0, 1) for every finite input, even where the exact value
    rounds to 0 or 1 in double precision (|alpha| beyond roughly 37 on the
    upper side and 708 on the lower side).

    Raises:
        DomainError: If any element is NaN or infinite.
    """
    arr, is_scalar = _as_float_array(alpha)
    _require_finite(arr, "alpha")
    out = np.clip(_expit(arr), _TINY, _ONE_BELOW)
    return _like_input(out, is_scalar)


def logistic_cdf(y: ArrayLike) -> float | Array:
    """CDF of the standard logistic distribution.

    Identical to `inv_logit`; kept under its own name because it plays the
    role of a distribution function rather than a link function.
    """
    return inv_logit(y)


def logistic_pdf(y: ArrayLike) -> float | Array:
    """Density of the standard logistic distribution.

    Equal to inv_logit(y) * (1 - inv_logit(y)) = exp(-y) / (1 + exp(-y))**2,
    evaluated as exp(-|y|) / (1 + exp(-|y|))**2 (the density is symmetric).
    This is also |d inv_logit(y) / dy|, the Jacobian of the log-odds
    transform.
    """
    arr, is_scalar = _as_float_array(y)
    _require_finite(arr, "y")
    e = np.exp(-np.abs(arr))
    return _like_input(e / (1.0 + e) ** 2, is_scalar)


def log_logistic_pdf(y: ArrayLike) -> float | Array:
    """log |d inv_logit(y) / dy|, the log Jacobian of the log-odds transform.

    Adding this to a log density stated over theta = inv_logit(y) gives the
    log density of y.
    """
    arr, is_scalar = _as_float_array(y)
    _require_finite(arr, "y")
    a = np.abs(arr)
    return _like_input(-a - 2.0 * np.log1p(np.exp(-a)), is_scalar)


def log_inv_logit(alpha: ArrayLike) -> float | Array:
    """log(inv_logit(alpha)) without forming inv_logit(alpha)."""
    arr, is_scalar = _as_float_array(alpha)
    _require_finite(arr, "alpha")
    return _like_input(_log_expit(arr), is_scalar)


def log1m_inv_logit(alpha: ArrayLike) -> float | Array:
    """log(1 - inv_logit(alpha)) without forming inv_logit(alpha)."""
    arr, is_scalar = _as_float_array(alpha)
    _require_finite(arr, "alpha")
    return _like_input(_log_expit(-arr), is_scalar)


def odds(theta: ArrayLike) -> float | Array:
    """Odds theta / (1 - theta) in (0, inf)."""
    arr, is_scalar = _as_float_array(theta)
    _require_open_unit(arr, "theta")
    return _like_input(arr / (1.0 - arr), is_scalar)
