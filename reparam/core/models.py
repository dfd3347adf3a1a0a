"""
The one-parameter Bernoulli models fitted by the inference engine.

Each model is a declarative pair of prior and likelihood over the data
binding ``{"N": number of trials, "y": outcomes}``. The engine only ever
works on the unconstrained log-odds scale alpha = logit(theta), and asks a
model for its log density there through :meth:`BernoulliModel.log_density`.

The three models differ only in how the parameter is declared:

* :class:`ProbabilityModel` declares theta in (0, 1). As for a constrained
  parameter in a probabilistic programming language, the engine adds the
  log Jacobian of theta = inv_logit(alpha) while sampling and leaves it out
  while optimizing, so optimization returns the posterior mode over theta.
* :class:`LogOddsModel` with ``jacobian_adjustment=False`` declares alpha
  and writes the Beta prior on inv_logit(alpha) without adjusting. The
  implied prior over theta is no longer the stated Beta.
* :class:`LogOddsModel` with ``jacobian_adjustment=True`` adds the log
  Jacobian itself and is equivalent to :class:`ProbabilityModel`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict

import numpy as np

from .module import Module, InputSpec
from .. import estimators
from ..custom_types import ArrayLike
from ..errors import BoundaryModeError, InvalidInputError
from ..estimators import PointEstimate, _positive_scalar
from ..transforms import inv_logit, log_inv_logit, log1m_inv_logit, log_logistic_pdf

__all__ = [
    "make_data",
    "validate_data",
    "BernoulliLikelihood",
    "BernoulliModel",
    "ProbabilityModel",
    "LogOddsModel",
]


def make_data(outcomes: ArrayLike) -> Dict[str, Any]:
    """Build the ``{"N": ..., "y": ...}`` data binding for a trial sequence."""
    y = estimators.validate_outcomes(outcomes)
    return {"N": int(y.size), "y": y}


def validate_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Check a data binding and return it with `y` canonicalized.

    Raises:
        InvalidInputError: If keys are missing, `y` is not a trial sequence,
            or `N` disagrees with the length of `y`.
    """
    if not isinstance(data, dict):
        raise InvalidInputError("data", f"expected a dict with keys 'N' and 'y'; got {type(data).__name__}")
    missing = [k for k in ("N", "y") if k not in data]
    if missing:
        raise InvalidInputError("data", f"missing keys {missing}")
    y = estimators.validate_outcomes(data["y"])
    if int(data["N"]) != y.size:
        raise InvalidInputError("data", f"N={data['N']!r} but y has {y.size} outcomes")
    return {"N": int(y.size), "y": y}


class BernoulliLikelihood(Module):
    """Bernoulli log-likelihood of a trial sequence, parameterized by log-odds.

    The engine calls `_log_likelihood_func` directly while optimizing and
    sampling, which needs immediate float results; the registered
    ``log_likelihood`` task is for use inside Prefect flows.
    """

    DEPENDENCIES = MappingProxyType({})

    def __init__(self):
        super().__init__()

        self.set_input(
            data=InputSpec(type=dict, required=True),
            alpha=InputSpec(type=float, required=True),
        )

        self.run_func(self._log_likelihood_task, name="log_likelihood")

    def _log_likelihood_func(self, data: Dict[str, Any], alpha: float) -> float:
        # s log(theta) + (N - s) log(1 - theta), never forming theta itself
        y = data["y"]
        s = float(np.sum(y))
        return float(s * log_inv_logit(alpha) + (data["N"] - s) * log1m_inv_logit(alpha))

    def _log_likelihood_task(self, *, data, alpha):
        return self._log_likelihood_func(validate_data(data), alpha)


class BernoulliModel(ABC):
    """A Beta(prior_a, prior_b) prior and a Bernoulli likelihood.

    Args:
        prior_a, prior_b: Positive Beta prior hyperparameters, stated on theta.
    """

    #: Name of the declared parameter.
    parameter: str = "theta"

    def __init__(self, prior_a: float = 1.0, prior_b: float = 1.0):
        self.prior_a = _positive_scalar(prior_a, "prior_a")
        self.prior_b = _positive_scalar(prior_b, "prior_b")
        self.likelihood = BernoulliLikelihood()

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label used in reports."""

    def log_prior_kernel(self, alpha: float) -> float:
        """Unnormalized Beta log density of theta = inv_logit(alpha), not adjusted."""
        return float((self.prior_a - 1.0) * log_inv_logit(alpha)
                     + (self.prior_b - 1.0) * log1m_inv_logit(alpha))

    @abstractmethod
    def log_density(self, alpha: float, data: Dict[str, Any], *, jacobian: bool = True) -> float:
        """Unnormalized log posterior density over the unconstrained alpha.

        Args:
            alpha: Log-odds value.
            data: Validated data binding.
            jacobian: Whether the engine wants the change-of-variables term
                for a constrained parameter. Sampling passes True,
                optimization passes False. Models declared directly over
                alpha ignore it.
        """

    @abstractmethod
    def closed_form(self, data: Dict[str, Any]) -> PointEstimate:
        """Exact (mode, mean) on the theta scale.

        `mode` is theta at the point the optimizer should report and `mean`
        is the posterior mean of theta that sampling should approach.
        """

    def constrain(self, alpha: float) -> Dict[str, float]:
        """Report a log-odds value in both parameterizations."""
        return {"alpha": float(alpha), "theta": float(inv_logit(alpha))}

    def posterior_params(self, data: Dict[str, Any]) -> tuple:
        """Conjugate Beta posterior parameters of theta under the stated prior."""
        return estimators.beta_posterior_params(data["y"], self.prior_a, self.prior_b)

    def __repr__(self):
        return f"{type(self).__name__}(prior_a={self.prior_a:g}, prior_b={self.prior_b:g})"


class ProbabilityModel(BernoulliModel):
    """theta ~ Beta(prior_a, prior_b); y ~ Bernoulli(theta), theta declared in (0, 1)."""

    parameter = "theta"

    @property
    def name(self) -> str:
        return "theta in (0, 1)"

    def log_density(self, alpha: float, data: Dict[str, Any], *, jacobian: bool = True) -> float:
        lp = self.log_prior_kernel(alpha) + self.likelihood._log_likelihood_func(data, alpha)
        if jacobian:
            lp += float(log_logistic_pdf(alpha))
        return lp

    def closed_form(self, data: Dict[str, Any]) -> PointEstimate:
        a, b = self.posterior_params(data)
        try:
            mode = estimators.beta_mode(a, b)
        except BoundaryModeError:
            mode = None
        return PointEstimate(mode=mode, mean=estimators.beta_mean(a, b))


class LogOddsModel(BernoulliModel):
    """alpha in R; theta = inv_logit(alpha) ~ Beta(prior_a, prior_b); y ~ Bernoulli(theta).

    Args:
        prior_a, prior_b: Beta prior hyperparameters stated on theta.
        jacobian_adjustment: Whether to add log |d theta / d alpha| so the
            prior over theta really is the stated Beta.
    """

    parameter = "alpha"

    def __init__(self, prior_a: float = 1.0, prior_b: float = 1.0, *, jacobian_adjustment: bool = True):
        super().__init__(prior_a, prior_b)
        self.jacobian_adjustment = bool(jacobian_adjustment)

    @property
    def name(self) -> str:
        return "alpha, Jacobian adjusted" if self.jacobian_adjustment else "alpha, unadjusted"

    def log_density(self, alpha: float, data: Dict[str, Any], *, jacobian: bool = True) -> float:
        lp = self.log_prior_kernel(alpha) + self.likelihood._log_likelihood_func(data, alpha)
        if self.jacobian_adjustment:
            lp += float(log_logistic_pdf(alpha))
        return lp

    def closed_form(self, data: Dict[str, Any]) -> PointEstimate:
        a, b = self.posterior_params(data)
        if self.jacobian_adjustment:
            # density over alpha is proportional to theta^a (1 - theta)^b
            m = estimators.beta_mean(a, b)
            return PointEstimate(mode=m, mean=m)
        # density over alpha is proportional to theta^(a-1) (1 - theta)^(b-1),
        # i.e. theta ~ Beta(a - 1, b - 1)
        if a <= 1.0 or b <= 1.0:
            raise InvalidInputError(
                "data",
                f"the unadjusted posterior over alpha is improper for Beta posterior parameters "
                f"a={a:g}, b={b:g}; it needs a > 1 and b > 1",
            )
        m = estimators.beta_mode(a, b)
        return PointEstimate(mode=m, mean=m)

    def __repr__(self):
        return (f"LogOddsModel(prior_a={self.prior_a:g}, prior_b={self.prior_b:g}, "
                f"jacobian_adjustment={self.jacobian_adjustment})")
