from __future__ import annotations

from typing import ClassVar, Dict, Type
from types import MappingProxyType
import logging

import numpy as np
from scipy.optimize import minimize_scalar

from .module import Module, InputSpec
from .models import BernoulliModel, validate_data
from .mcmc import MCMC, MetropolisHastings, PosteriorDraws
from ..errors import InferenceError


__all__ = [
    "Optimizer",
    "InferenceEngine",
]

logger = logging.getLogger(__name__)


class Optimizer(Module):
    """Posterior mode (or maximum likelihood) point estimate of a model.

    Maximizes the model's log density over the log-odds alpha with the
    change-of-variables term left out, as a probabilistic programming
    language's optimizer does for constrained parameters. For a model
    declared over theta that yields the posterior mode over theta; for a
    model declared over alpha it yields the mode over alpha.

    The search is a bounded scalar minimization of the negative log density
    on ``bounds``. When the optimum lands on the edge of that interval the
    density has no interior maximum there (e.g. all-success data under a flat
    prior), and :class:`InferenceError` is raised.
    """

    DEPENDENCIES = MappingProxyType({})

    def __init__(self):
        super().__init__()
        self.set_input(
            model=InputSpec(type=BernoulliModel, required=True),
            data=InputSpec(type=dict, required=True),
            bounds=InputSpec(type=tuple, required=False, default=(-30.0, 30.0)),
            xatol=InputSpec(type=float, required=False, default=1e-10),
        )
        self.run_func(self._optimize, name="optimize")

    def _optimize(self, *, model, data, bounds=(-30.0, 30.0), xatol=1e-10) -> Dict[str, float]:
        """Find the maximizer of the model's log density over alpha.

        Returns:
            ``{"alpha": ..., "theta": ..., "log_density": ...}``

        Raises:
            InferenceError: If the optimizer fails or stops on a bound.
        """
        data = validate_data(data)
        lo, hi = (float(v) for v in bounds)
        if not lo < hi:
            raise ValueError(f"bounds must satisfy lower < upper; got {bounds}")

        def neg_log_density(alpha):
            return -model.log_density(alpha, data, jacobian=False)

        result = minimize_scalar(neg_log_density, bounds=(lo, hi), method="bounded",
                                 options={"xatol": xatol})
        if not result.success:
            raise InferenceError(f"optimizer failed for {model.name}: {result.message}")

        alpha = float(result.x)
        edge = 1e-3 * (hi - lo)
        if alpha - lo < edge or hi - alpha < edge:
            raise InferenceError(
                f"optimum for {model.name} at alpha={alpha:.4g} is on the search boundary "
                f"({lo:g}, {hi:g}); the log density has no interior maximum"
            )
        logger.info("optimized %s: alpha=%.6f after %d evaluations", model.name, alpha, result.nfev)

        out = model.constrain(alpha)
        out["log_density"] = -float(result.fun)
        return out


class InferenceEngine(Module):
    """The narrow optimize / sample interface used by the experiment driver.

    Composes an :class:`Optimizer` and an :class:`MCMC` module. Both run
    functions are registered as Prefect tasks for use inside flows.
    :meth:`run_optimize` and :meth:`run_sample` are the same computations
    as plain method calls, for code that runs outside a Prefect flow.

    Attributes:
        DEPENDENCIES: ``'optimizer'`` and ``'mcmc'``.
    """

    DEPENDENCIES: ClassVar[Dict[str, Type[Module]]] = MappingProxyType({
        'optimizer': Optimizer,
        'mcmc': MCMC,
    })

    def __init__(self, optimizer: Optimizer, mcmc: MCMC, **dependencies):
        super().__init__(optimizer=optimizer, mcmc=mcmc, **dependencies)

        self.set_input(
            model=InputSpec(type=BernoulliModel, required=True),
            data=InputSpec(type=dict, required=True),
        )
        self.run_func(self._optimize, name="optimize")

        self.set_input(
            model=InputSpec(type=BernoulliModel, required=True),
            data=InputSpec(type=dict, required=True),
            iterations=InputSpec(type=int, required=True),
            proposal_std=InputSpec(type=float, required=False, default=1.0),
            burn_in=InputSpec(required=False, default=None),
            rng=InputSpec(required=False, default=None),
        )
        self.run_func(self._sample, name="sample")

    @classmethod
    def default(cls) -> "InferenceEngine":
        """Engine wired with the stock optimizer and Metropolis–Hastings sampler."""
        return cls(optimizer=Optimizer(), mcmc=MCMC(sampler=MetropolisHastings()))

    def _optimize(self, *, model, data) -> Dict[str, float]:
        """Point estimate per parameter; see :class:`Optimizer`."""
        return self.dependencies['optimizer']._optimize(model=model, data=data)

    def _sample(self, *, model, data, iterations, proposal_std=1.0, burn_in=None, rng=None) -> PosteriorDraws:
        """`iterations` posterior draws after burn-in, started at the posterior mode over alpha.

        The chain starts where the log density with the Jacobian term is
        largest; when that maximum is not interior it starts at 0.
        """
        data = validate_data(data)
        initial = self._initial_point(model, data)
        return self.dependencies['mcmc']._calculate_posterior(
            model=model,
            data=data,
            num_samples=iterations,
            initial_param=initial,
            proposal_std=proposal_std,
            burn_in=burn_in,
            rng=rng,
        )

    def run_optimize(self, model: BernoulliModel, data) -> Dict[str, float]:
        """``optimize`` without Prefect."""
        return self._optimize(model=model, data=data)

    def run_sample(self, model: BernoulliModel, data, iterations: int, *, proposal_std: float = 1.0,
                   burn_in=None, rng=None) -> PosteriorDraws:
        """``sample`` without Prefect."""
        return self._sample(model=model, data=data, iterations=iterations,
                            proposal_std=proposal_std, burn_in=burn_in, rng=rng)

    @staticmethod
    def _initial_point(model: BernoulliModel, data) -> float:
        result = minimize_scalar(lambda a: -model.log_density(a, data, jacobian=True),
                                 bounds=(-30.0, 30.0), method="bounded")
        alpha = float(result.x) if result.success else 0.0
        return alpha if np.isfinite(alpha) and abs(alpha) < 29.0 else 0.0
