# distributions/distribution.py
from __future__ import annotations

from typing import Generic, Callable, Any
from abc import ABC, abstractmethod

import numpy as np

from ..custom_types import Array, ArrayLike, PRNG, T, Float
from ..array_backend.utils import _as_array, _ensure_vector

__all__ = [
    "Distribution",
    "EmpiricalDistribution",
]

# -------------------------- Abstract Classes ----------------------------


class Distribution(Generic[T], ABC):
    """
    Abstract base class for any distribution class.
    """

    def sample(self, n_samples: int = 1) -> Array[T]:
        """
        Optional. If a subclass can’t sample, it may leave this unimplemented.

        Sample n_samples items from the distribution.
        Returns a ndarray of T.
        """
        raise NotImplementedError("This method may be implemented by subclasses (optional)")

    def density(self, data: ArrayLike) -> Array[Float]:
        """
        Optional. If a subclass can’t evaluate densities, it may leave this unimplemented.

        Compute p(data) under this distribution.
        """
        raise NotImplementedError("This method may be implemented by subclasses (optional)")

    def log_density(self, data: ArrayLike) -> Array[Float]:
        """
        Optional. If a subclass can’t evaluate densities, it may leave this unimplemented.

        Compute log p(data) under this distribution.
        """
        raise NotImplementedError("This method may be implemented by subclasses (optional)")

    def expectation(self, func: Callable[[Array[T]], Array]) -> float:
        """
        Optional.

        Expected value of func(x) under this distribution.
        """
        raise NotImplementedError("This method may be implemented by subclasses (optional)")

    @classmethod
    @abstractmethod
    def from_distribution(cls, other: Distribution, **fit_kwargs: Any) -> Distribution[T]:
        """
        Convert the distribution `other` into a distribution of type `cls`. This will
        typically be an approximation, e.g. by moment matching.
        """
        raise NotImplementedError("This method should be implemented by subclasses")


class EmpiricalDistribution(Distribution):
    """ Container for (weighted) draws of a scalar parameter.

    The discrete distribution defined by a set of `n`, potentially weighed,
    draws. Posterior draws returned by the sampler are wrapped in this class.

    Args:
        x: array-like, shape (n,) or (n, 1)
            The draws defining the empirical distribution.
        weights: array-like, shape (n,), optional
            Nonnegative weights; will be normalized to sum to 1. If None,
            uniform weights are assigned.
        rng: np.random.Generator, optional
            Random number generator for resampling.
    """

    def __init__(
        self,
        x: ArrayLike,
        weights: ArrayLike | None = None,
        *,
        rng: PRNG | None = None,
    ):
        X = _ensure_vector(x).astype(float)
        n = X.shape[0]
        if n < 1:
            raise ValueError("EmpiricalDistribution requires at least one sample.")
        if not np.all(np.isfinite(X)):
            raise ValueError("EmpiricalDistribution samples must be finite.")

        if weights is None:
            w = np.full(n, 1.0 / n)
        else:
            w = _ensure_vector(weights, length=n).astype(float)
            if np.any(w < 0):
                raise ValueError("weights must be nonnegative.")
            s = w.sum()
            if s <= 0:
                raise ValueError("weights cannot all be zero.")
            w = w / s

        self._X = X
        self._w = w
        self._n = int(n)
        self._rng = rng or np.random.default_rng()

        self._mean = float((self._w * self._X).sum())
        self._var = float((self._w * (self._X - self._mean) ** 2).sum())

        # cumulative weights for quantiles
        order = np.argsort(self._X, kind="stable")
        self._sorted = self._X[order]
        self._cw = np.cumsum(self._w[order])

    @property
    def n(self) -> int:
        """Number of stored samples."""
        return self._n

    @property
    def samples(self) -> Array:
        """A view of the stored samples, shape (n,)."""
        return self._X

    @property
    def weights(self) -> Array:
        """A view of normalized weights, shape (n,)."""
        return self._w

    def mean(self) -> float:
        """Weighted mean."""
        return self._mean

    def var(self) -> float:
        """Weighted *population* variance."""
        return self._var

    def std(self) -> float:
        """Weighted population standard deviation."""
        return float(np.sqrt(max(self._var, 0.0)))

    def quantile(self, q: ArrayLike) -> float | Array:
        """Weighted quantile(s): smallest draw whose cumulative weight reaches q."""
        qs = _as_array(q).astype(float)
        if np.any((qs < 0.0) | (qs > 1.0)):
            raise ValueError(f"quantile levels must lie in [0, 1]; got {q!r}")
        idx = np.searchsorted(self._cw, qs, side="left")
        idx = np.minimum(idx, self._n - 1)
        out = self._sorted[idx]
        return float(out) if np.ndim(out) == 0 else out

    def sample(self, n_samples: int = 1, *, replace: bool = True) -> Array:
        """
        Resample draws from the empirical distribution using the stored
        weights. Returns shape (n_samples,).
        """
        n_samples = int(n_samples)
        if not replace and n_samples > self._n:
            raise ValueError("Cannot sample more than n without replacement.")
        idx = self._rng.choice(self._n, size=n_samples, replace=replace, p=self._w)
        return self._X[idx]

    rvs = sample

    def expectation(self, func: Callable[[Array], Array]) -> float:
        """Weighted average of func over the stored draws."""
        Y = np.asarray(func(self._X), dtype=float)
        if Y.shape != self._X.shape:
            raise ValueError(f"func must map draws elementwise; got output shape {Y.shape}")
        return float((self._w * Y).sum())

    def map(self, func: Callable[[Array], Array]) -> "EmpiricalDistribution":
        """Push the draws through `func`, keeping the weights."""
        return EmpiricalDistribution(func(self._X), self._w, rng=self._rng)

    def density(self, data: ArrayLike) -> Array:
        raise NotImplementedError("Density not implemented for EmpiricalDistribution.")

    def log_density(self, data: ArrayLike) -> Array:
        raise NotImplementedError("Log density not implemented for EmpiricalDistribution.")

    @classmethod
    def from_distribution(
        cls,
        other: Distribution,
        *,
        num_samples: int = 1024,
        **fit_kwargs: Any,
    ) -> "EmpiricalDistribution":
        """Draw `num_samples` samples from `other`."""
        return cls(other.sample(num_samples), **fit_kwargs)

    def __repr__(self):
        return f"EmpiricalDistribution(n={self._n}, mean={self._mean:.6g}, std={self.std():.6g})"
