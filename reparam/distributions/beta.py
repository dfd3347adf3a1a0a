# distributions/beta.py
from __future__ import annotations

from typing import Any, Tuple

import numpy as np
from scipy import stats
from scipy.special import betaln

from ..custom_types import Array, ArrayLike, PRNG
from ..array_backend.utils import _as_float_array, _like_input
from ..errors import BoundaryModeError, DomainError
from .. import estimators
from ..transforms import inv_logit, log_inv_logit, log1m_inv_logit, logit
from .distribution import Distribution, EmpiricalDistribution

__all__ = [
    "Beta",
    "LogOddsBeta",
]


class Beta(Distribution):
    """Beta(a, b) distribution over a probability theta in (0, 1).

    Closed-form summaries delegate to `reparam.estimators`; densities,
    quantiles and sampling go through `scipy.stats.beta`.

    Args:
        a, b: Positive shape parameters.
        rng: Random number generator used by `sample`.
    """

    def __init__(self, a: float, b: float, *, rng: PRNG | None = None):
        # validates a, b
        estimators.beta_mean(a, b)
        self._a = float(a)
        self._b = float(b)
        self._rng = rng or np.random.default_rng()
        self._dist = stats.beta(self._a, self._b)

    @classmethod
    def posterior(cls, outcomes: ArrayLike, prior_a: float = 1, prior_b: float = 1,
                  *, rng: PRNG | None = None) -> "Beta":
        """Conjugate posterior of a Beta(prior_a, prior_b) prior given Bernoulli outcomes."""
        a, b = estimators.beta_posterior_params(outcomes, prior_a, prior_b)
        return cls(a, b, rng=rng)

    @property
    def a(self) -> float:
        return self._a

    @property
    def b(self) -> float:
        return self._b

    def mean(self) -> float:
        return estimators.beta_mean(self._a, self._b)

    def mode(self) -> float:
        """Interior mode; raises `BoundaryModeError` if there is none."""
        return estimators.beta_mode(self._a, self._b)

    def var(self) -> float:
        return estimators.beta_variance(self._a, self._b)

    def std(self) -> float:
        return float(np.sqrt(self.var()))

    def credible_interval(self, level: float = 0.90) -> Tuple[float, float]:
        return estimators.beta_credible_interval(self._a, self._b, level)

    def density(self, data: ArrayLike) -> float | Array:
        arr, is_scalar = _as_float_array(data)
        return _like_input(self._dist.pdf(arr), is_scalar)

    def log_density(self, data: ArrayLike) -> float | Array:
        arr, is_scalar = _as_float_array(data)
        return _like_input(self._dist.logpdf(arr), is_scalar)

    def cdf(self, data: ArrayLike) -> float | Array:
        arr, is_scalar = _as_float_array(data)
        return _like_input(self._dist.cdf(arr), is_scalar)

    def sample(self, n_samples: int = 1) -> Array:
        return self._dist.rvs(size=int(n_samples), random_state=self._rng)

    def point_estimate(self) -> estimators.PointEstimate:
        """(mode, mean); the mode is None when it lies on the boundary."""
        try:
            mode = self.mode()
        except BoundaryModeError:
            mode = None
        return estimators.PointEstimate(mode=mode, mean=self.mean())

    @classmethod
    def from_distribution(cls, other: Distribution, **fit_kwargs: Any) -> "Beta":
        """Moment-match a Beta to `other`, which must expose mean() and var().

        Raises:
            DomainError: If the moments are not those of a distribution on
                (0, 1) with positive variance below mean * (1 - mean).
        """
        m = float(other.mean())
        v = float(other.var())
        if not 0.0 < m < 1.0:
            raise DomainError("mean", m, "0 < mean < 1")
        if not 0.0 < v < m * (1.0 - m):
            raise DomainError("var", v, f"0 < var < mean * (1 - mean) = {m * (1.0 - m):g}")
        k = m * (1.0 - m) / v - 1.0
        return cls(m * k, (1.0 - m) * k, **fit_kwargs)

    def __repr__(self):
        return f"Beta(a={self._a:g}, b={self._b:g})"


class LogOddsBeta(Distribution):
    """Distribution of alpha = logit(theta) when theta ~ Beta(a, b).

    With `jacobian=True` the density is the properly transformed one,

        p(alpha) = Beta(inv_logit(alpha) | a, b) * inv_logit(alpha) * (1 - inv_logit(alpha)),

    which integrates to one and has its mode at logit(a / (a + b)).

    With `jacobian=False` it is the unadjusted density Beta(inv_logit(alpha) | a, b),
    i.e. the same formula written in the new variable. That function does
    not integrate to one, and its maximum is logit of the Beta mode, which is
    where an optimizer lands when the adjustment is left out.
    """

    def __init__(self, a: float, b: float, *, jacobian: bool = True, rng: PRNG | None = None):
        self._beta = Beta(a, b, rng=rng)
        self._jacobian = bool(jacobian)
        self._log_norm = betaln(self._beta.a, self._beta.b)

    @property
    def jacobian(self) -> bool:
        return self._jacobian

    @property
    def base(self) -> Beta:
        """The Beta distribution over theta."""
        return self._beta

    def log_density(self, data: ArrayLike) -> float | Array:
        arr, is_scalar = _as_float_array(data)
        a, b = self._beta.a, self._beta.b
        if self._jacobian:
            # Beta kernel theta^(a-1) (1-theta)^(b-1) times theta (1-theta)
            out = a * log_inv_logit(arr) + b * log1m_inv_logit(arr)
        else:
            out = (a - 1.0) * log_inv_logit(arr) + (b - 1.0) * log1m_inv_logit(arr)
        return _like_input(np.asarray(out) - self._log_norm, is_scalar)

    def density(self, data: ArrayLike) -> float | Array:
        out = np.exp(self.log_density(data))
        return float(out) if np.ndim(out) == 0 else out

    def mode(self) -> float:
        """Maximizer of the (possibly unadjusted) density over alpha."""
        if self._jacobian:
            return estimators.beta_logodds_mode(self._beta.a, self._beta.b)
        return logit(self._beta.mode())

    def sample(self, n_samples: int = 1) -> Array:
        if not self._jacobian:
            raise NotImplementedError("The unadjusted density is not a distribution; it cannot be sampled.")
        # clip keeps logit finite when a Beta draw rounds to 0 or 1
        theta = np.clip(self._beta.sample(n_samples), np.finfo(float).tiny, np.nextafter(1.0, 0.0))
        return logit(theta)

    def cdf(self, data: ArrayLike) -> float | Array:
        if not self._jacobian:
            raise NotImplementedError("The unadjusted density has no distribution function.")
        return self._beta.cdf(inv_logit(data))

    @classmethod
    def from_distribution(cls, other: Distribution, **fit_kwargs: Any) -> "LogOddsBeta":
        """Fit to draws over alpha by moment matching their image under inv_logit."""
        if not isinstance(other, EmpiricalDistribution):
            raise TypeError(f"expected an EmpiricalDistribution of log-odds draws; got {type(other).__name__}")
        fitted = Beta.from_distribution(other.map(inv_logit))
        return cls(fitted.a, fitted.b, **fit_kwargs)

    def __repr__(self):
        return f"LogOddsBeta(a={self._beta.a:g}, b={self._beta.b:g}, jacobian={self._jacobian})"
