from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Dict, Type
from types import MappingProxyType
import logging

import numpy as np

from .module import Module, InputSpec
from .models import BernoulliModel, validate_data
from ..custom_types import Array
from ..array_backend.utils import _as_rng
from ..distributions import EmpiricalDistribution
from ..errors import InferenceError
from ..transforms import inv_logit


__all__ = [
    "Chain",
    "PosteriorDraws",
    "MetropolisHastings",
    "MCMC",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chain:
    """Raw output of one sampler run.

    Attributes:
        draws: Chain states, shape (num_samples,).
        accepted: Whether the proposal at each step was accepted.
        acceptance_rate: Fraction of accepted proposals over the whole chain.
    """
    draws: Array
    accepted: Array
    acceptance_rate: float


@dataclass(frozen=True)
class PosteriorDraws:
    """Posterior draws of one model, in both parameterizations.

    Attributes:
        model: Name of the fitted model.
        alpha: Draws of the log-odds.
        theta: The same draws mapped through inv_logit.
        acceptance_rate: Fraction of accepted proposals among the kept
            draws (burn-in excluded).
    """
    model: str
    alpha: EmpiricalDistribution
    theta: EmpiricalDistribution
    acceptance_rate: float

    def summary(self, level: float = 0.90) -> Dict[str, Dict[str, float]]:
        """Mean, sd and equal-tailed quantiles per parameter."""
        tail = 0.5 * (1.0 - level)
        out = {}
        for name, dist in (("alpha", self.alpha), ("theta", self.theta)):
            out[name] = {
                "mean": dist.mean(),
                "sd": dist.std(),
                "lower": dist.quantile(tail),
                "median": dist.quantile(0.5),
                "upper": dist.quantile(1.0 - tail),
            }
        return out


class MetropolisHastings(Module):
    """Random-walk Metropolis–Hastings sampler for a single real parameter.

    Proposals are drawn from Normal(current, proposal_std^2) and accepted
    with probability min(1, p(proposal) / p(current)).

    Attributes:
        DEPENDENCIES: The set of required dependencies (empty for this module).

    Notes:
        - Stateless: every run takes its own ``rng`` (a seed or a
          ``np.random.Generator``); no global random state is touched.
        - Expects a callable ``log_target`` that returns the log-density of a state.
        - Only meant for the one-dimensional log-odds targets in this package.
    """

    DEPENDENCIES = MappingProxyType({})

    def __init__(self):
        """Initializes the Metropolis–Hastings sampler and declares its inputs."""
        super().__init__()
        self.set_input(
            log_target=InputSpec(type=Callable, required=True),
            num_samples=InputSpec(type=int, required=True),
            initial_state=InputSpec(type=float, required=True),
            proposal_std=InputSpec(type=float, required=False, default=1.0),
            rng=InputSpec(required=False, default=None),
        )
        self.run_func(self._sample_posterior, name="sample_posterior")

    def _sample_posterior(self, *, log_target, num_samples, initial_state, proposal_std=1.0, rng=None) -> Chain:
        """Draws samples from a target distribution using the MH algorithm.

        Args:
            log_target: Function that returns the unnormalized log density of a state.
            num_samples: Number of MCMC iterations to perform.
            initial_state: Initial value of the Markov chain.
            proposal_std: Standard deviation of the Normal proposal
                kernel. Defaults to 1.0.
            rng: Seed or generator for proposals and acceptance draws.

        Returns:
            Chain of ``num_samples`` states (the initial state excluded) and
            the acceptance rate.

        Raises:
            ValueError: If ``num_samples`` < 1 or ``proposal_std`` <= 0.
            InferenceError: If the initial state has zero or undefined density.
        """
        num_samples = int(num_samples)
        if num_samples < 1:
            raise ValueError(f"num_samples must be >= 1; got {num_samples}")
        if not proposal_std > 0.0:
            raise ValueError(f"proposal_std must be > 0; got {proposal_std}")
        gen = _as_rng(rng)

        current = float(initial_state)
        current_log_prob = log_target(current)
        if not np.isfinite(current_log_prob):
            raise InferenceError(f"log density at initial_state={current} is {current_log_prob}")

        samples = np.empty(num_samples)
        accepted = np.zeros(num_samples, dtype=bool)
        steps = gen.normal(0.0, proposal_std, size=num_samples)
        log_u = np.log(gen.uniform(size=num_samples))
        for i in range(num_samples):
            proposal = current + steps[i]
            prop_log_prob = log_target(proposal)
            if log_u[i] < prop_log_prob - current_log_prob:
                current = proposal
                current_log_prob = prop_log_prob
                accepted[i] = True
            samples[i] = current
        return Chain(draws=samples, accepted=accepted, acceptance_rate=float(accepted.mean()))


class MCMC(Module):
    """Posterior sampling of a :class:`BernoulliModel` over its log-odds.

    Combines a model's log density (with the change-of-variables term
    requested, as for sampling a constrained parameter) with the
    :class:`MetropolisHastings` sampler, discards burn-in, and wraps what is
    left in :class:`PosteriorDraws`.

    Attributes:
        DEPENDENCIES: Required module dependencies: ``'sampler'``.
    """

    DEPENDENCIES: ClassVar[Dict[str, Type[Module]]] = MappingProxyType({
        'sampler': MetropolisHastings,
    })

    def __init__(self, sampler: MetropolisHastings, **dependencies):
        """Initializes the MCMC module.

        Args:
            sampler: Sampling module
            **dependencies: Other module dependencies
        """
        super().__init__(sampler=sampler, **dependencies)

        self.set_input(
            model=InputSpec(type=BernoulliModel, required=True),
            data=InputSpec(type=dict, required=True),
            num_samples=InputSpec(type=int, required=True),
            initial_param=InputSpec(type=float, required=False, default=0.0),
            proposal_std=InputSpec(type=float, required=False, default=1.0),
            burn_in=InputSpec(required=False, default=None),
            rng=InputSpec(required=False, default=None),
        )

        self.run_func(
            self._calculate_posterior,
            name="calculate_posterior",
            )

    def _calculate_posterior(self, *, model, data, num_samples, initial_param=0.0,
                             proposal_std=1.0, burn_in=None, rng=None) -> PosteriorDraws:
        """Estimates the posterior distribution via MCMC sampling.

        Args:
            model: Model whose posterior over alpha is sampled.
            data: ``{"N": ..., "y": ...}`` data binding.
            num_samples: Number of draws kept after burn-in.
            initial_param: Starting log-odds value.
            proposal_std: Standard deviation of the random-walk proposal.
            burn_in: Number of initial iterations discarded. Defaults to
                ``num_samples // 4``.
            rng: Seed or generator; the run is reproducible given a seed.

        Returns:
            Posterior draws of alpha and theta.
        """
        data = validate_data(data)
        sampler = self.dependencies['sampler']
        num_samples = int(num_samples)
        if num_samples < 1:
            raise ValueError(f"num_samples must be >= 1; got {num_samples}")
        burn_in = num_samples // 4 if burn_in is None else int(burn_in)
        if burn_in < 0:
            raise ValueError(f"burn_in must be >= 0; got {burn_in}")

        def log_target(alpha):
            """Unnormalized log posterior of alpha, Jacobian requested."""
            return model.log_density(alpha, data, jacobian=True)

        chain = sampler._sample_posterior(
            log_target=log_target,
            num_samples=num_samples + burn_in,
            initial_state=initial_param,
            proposal_std=proposal_std,
            rng=_as_rng(rng),
        )
        kept = chain.draws[burn_in:]
        acceptance = float(chain.accepted[burn_in:].mean())
        logger.info("sampled %s: %d draws kept, %d burn-in, acceptance %.3f",
                    model.name, kept.size, burn_in, acceptance)
        if acceptance < 0.05:
            logger.warning("low acceptance rate %.3f for %s; consider a smaller proposal_std",
                           acceptance, model.name)

        alpha = EmpiricalDistribution(kept)
        return PosteriorDraws(
            model=model.name,
            alpha=alpha,
            theta=alpha.map(inv_logit),
            acceptance_rate=acceptance,
        )
