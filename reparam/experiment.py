# experiment.py
"""
Experiment driver: synthetic Bernoulli trials and the estimates built on them.

The pure part (`generate_trials`, `summarize`) needs nothing beyond the
closed-form estimators. `compare_parameterizations` additionally fits the
three one-parameter models through the inference engine and pairs every
engine result with its exact counterpart, which is what the walkthrough in
``examples/example_jacobian.py`` prints.

Nothing here touches global random state: every random operation takes an
integer seed or a ``np.random.Generator``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from .custom_types import Array, ArrayLike, SeedLike
from .array_backend.utils import _as_rng, _ensure_real_scalar
from .errors import BoundaryModeError, DomainError, InferenceError, InvalidInputError
from . import estimators
from .estimators import PointEstimate
from .transforms import logistic_pdf, logit
from .core import InferenceEngine, LogOddsModel, ProbabilityModel, make_data

__all__ = [
    "TrialSummary",
    "ModelComparison",
    "ExperimentConfig",
    "ExperimentReport",
    "generate_trials",
    "summarize",
    "sample_uniform_logodds",
    "jacobian_check",
    "compare_parameterizations",
    "run_experiment",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialSummary:
    """Closed-form estimates for one trial sequence.

    Attributes:
        n: Number of trials.
        successes: Number of ones.
        mle: Maximum likelihood estimate successes / n.
        posterior_a, posterior_b: Beta posterior parameters.
        posterior: (mode, mean) of the Beta posterior over theta. `mode` is
            None when the posterior has no interior mode.
        mode_location: 0.0 or 1.0 when the posterior density is largest at
            that end, None otherwise.
    """
    n: int
    successes: int
    mle: float
    posterior_a: float
    posterior_b: float
    posterior: PointEstimate
    mode_location: Optional[float] = None


@dataclass(frozen=True)
class ModelComparison:
    """Engine results for one model next to the exact values.

    A step that cannot be carried out for the data at hand (no interior
    optimum, improper posterior) leaves its fields as None and adds its
    reason to `failures`.

    Attributes:
        model: Model label.
        parameter: Declared parameter ("theta" or "alpha").
        optimum: Optimizer output, ``{"alpha", "theta", "log_density"}``.
        posterior_mean: Sampled posterior means, ``{"alpha", "theta"}``.
        closed_form: Exact (mode, mean) on the theta scale.
        acceptance_rate: Sampler acceptance rate.
        failures: Error messages of the steps that failed.
    """
    model: str
    parameter: str
    optimum: Optional[Dict[str, float]]
    posterior_mean: Optional[Dict[str, float]]
    closed_form: Optional[PointEstimate]
    acceptance_rate: Optional[float]
    failures: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExperimentConfig:
    """Settings of one run of the walkthrough.

    Attributes:
        n: Number of Bernoulli trials to simulate.
        theta: True success probability.
        seed: Seed for trial generation; the sampler uses ``seed + 1``.
        prior_a, prior_b: Beta prior hyperparameters.
        num_samples: Posterior draws kept per model.
        burn_in: Discarded sampler iterations per model.
        proposal_std: Random-walk proposal scale on the log-odds.
        uniform_draws: Number of Uniform(0, 1) draws for the Jacobian check.
    """
    n: int = 10
    theta: float = 0.3
    seed: int = 123
    prior_a: float = 1.0
    prior_b: float = 1.0
    num_samples: int = 10_000
    burn_in: int = 1_000
    proposal_std: float = 1.0
    uniform_draws: int = 100_000

    def __post_init__(self):
        for name in ("n", "num_samples", "burn_in", "uniform_draws", "seed"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"ExperimentConfig.{name} must be an int; got {type(value).__name__}")
        if self.seed < 0:
            raise DomainError("seed", self.seed, "seed >= 0")
        if self.n < 1:
            raise DomainError("n", self.n, "n >= 1")
        if self.num_samples < 1:
            raise DomainError("num_samples", self.num_samples, "num_samples >= 1")
        if self.burn_in < 0:
            raise DomainError("burn_in", self.burn_in, "burn_in >= 0")
        if self.uniform_draws < 1:
            raise DomainError("uniform_draws", self.uniform_draws, "uniform_draws >= 1")
        if not 0.0 <= self.theta <= 1.0:
            raise DomainError("theta", self.theta, "0 <= theta <= 1")
        if not self.proposal_std > 0.0:
            raise DomainError("proposal_std", self.proposal_std, "proposal_std > 0")
        # validates the prior
        estimators.beta_mean(self.prior_a, self.prior_b)


@dataclass(frozen=True)
class ExperimentReport:
    """Everything `run_experiment` computed."""
    config: ExperimentConfig
    outcomes: Array
    summary: TrialSummary
    comparisons: List[ModelComparison] = field(default_factory=list)
    jacobian_deviation: Optional[float] = None


def generate_trials(n: int, theta: float, rng_seed: SeedLike = None) -> Array:
    """Draw `n` independent Bernoulli(`theta`) outcomes.

    Args:
        n: Number of trials, n >= 0.
        theta: Success probability, 0 <= theta <= 1.
        rng_seed: Integer seed or ``np.random.Generator``. The same seed, n
            and theta always give the same sequence.

    Returns:
        Int array of zeros and ones, shape (n,).
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 0:
        raise DomainError("n", n, "integer n >= 0")
    try:
        p = float(_ensure_real_scalar(theta))
    except (TypeError, ValueError) as e:
        raise DomainError("theta", theta, "a real scalar") from e
    if not 0.0 <= p <= 1.0:
        raise DomainError("theta", theta, "0 <= theta <= 1")
    rng = _as_rng(rng_seed)
    return rng.binomial(1, p, size=int(n)).astype(int)


def summarize(outcomes: ArrayLike, prior_a: float = 1, prior_b: float = 1) -> TrialSummary:
    """MLE plus Beta posterior mean and mode for a trial sequence. No I/O."""
    y = estimators.validate_outcomes(outcomes)
    a, b = estimators.beta_posterior_params(y, prior_a, prior_b)
    try:
        mode = estimators.beta_mode(a, b)
        location = None
    except BoundaryModeError as e:
        mode = None
        location = e.location
    return TrialSummary(
        n=int(y.size),
        successes=int(y.sum()),
        mle=estimators.mle_bernoulli(y),
        posterior_a=a,
        posterior_b=b,
        posterior=PointEstimate(mode=mode, mean=estimators.beta_mean(a, b)),
        mode_location=location,
    )


def sample_uniform_logodds(n: int, rng_seed: SeedLike = None) -> Array:
    """Log-odds of `n` Uniform(0, 1) draws.

    By the change-of-variables formula these follow the standard logistic
    distribution, whose density is the Jacobian |d theta / d alpha|.
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
        raise DomainError("n", n, "integer n >= 1")
    rng = _as_rng(rng_seed)
    u = rng.uniform(size=int(n))
    # uniform() can return exactly 0.0
    u = np.where(u > 0.0, u, np.nextafter(0.0, 1.0))
    return logit(u)


def jacobian_check(draws: ArrayLike, bins: int = 60, span: Tuple[float, float] = (-6.0, 6.0)) -> float:
    """Largest gap between the histogram density of `draws` and `logistic_pdf`.

    The histogram is normalized by the total number of draws, so mass outside
    `span` counts against it. Small values confirm that log-odds of uniform
    draws are logistic distributed.
    """
    if isinstance(bins, bool) or not isinstance(bins, (int, np.integer)) or bins < 1:
        raise DomainError("bins", bins, "integer bins >= 1")
    x = np.asarray(draws, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise DomainError("draws", x.shape, "a non-empty 1-D array")
    lo, hi = (float(v) for v in span)
    if not lo < hi:
        raise DomainError("span", span, "lower < upper")
    counts, edges = np.histogram(x, bins=int(bins), range=(lo, hi))
    width = edges[1] - edges[0]
    density = counts / (x.size * width)
    centers = 0.5 * (edges[:-1] + edges[1:])
    return float(np.max(np.abs(density - logistic_pdf(centers))))


def compare_parameterizations(
    outcomes: ArrayLike,
    *,
    engine: InferenceEngine | None = None,
    prior_a: float = 1.0,
    prior_b: float = 1.0,
    iterations: int = 10_000,
    burn_in: int | None = None,
    proposal_std: float = 1.0,
    rng_seed: SeedLike = None,
) -> List[ModelComparison]:
    """Fit the three models with the engine and pair results with exact values.

    The models are: theta declared in (0, 1); alpha declared with the prior
    left unadjusted; alpha declared with the Jacobian adjustment.

    Steps that fail for the data at hand do not stop the comparison. An
    optimization without an interior optimum (no successes or no failures
    under a flat prior) leaves `optimum` as None, and a model whose posterior
    over alpha is improper is reported with no engine results at all. The
    reasons are kept in `ModelComparison.failures`.
    """
    engine = engine or InferenceEngine.default()
    rng = _as_rng(rng_seed)
    data = make_data(outcomes)

    models = [
        ProbabilityModel(prior_a, prior_b),
        LogOddsModel(prior_a, prior_b, jacobian_adjustment=False),
        LogOddsModel(prior_a, prior_b, jacobian_adjustment=True),
    ]

    results = []
    for model in models:
        failures = []
        try:
            exact = model.closed_form(data)
        except InvalidInputError as e:
            # improper posterior: nothing to optimize or sample
            logger.warning("skipping %s: %s", model.name, e)
            results.append(ModelComparison(
                model=model.name,
                parameter=model.parameter,
                optimum=None,
                posterior_mean=None,
                closed_form=None,
                acceptance_rate=None,
                failures=(str(e),),
            ))
            continue

        try:
            optimum = engine.run_optimize(model, data)
        except InferenceError as e:
            logger.warning("no optimum for %s: %s", model.name, e)
            optimum = None
            failures.append(str(e))

        try:
            draws = engine.run_sample(model, data, iterations, proposal_std=proposal_std,
                                      burn_in=burn_in, rng=rng)
        except InferenceError as e:
            logger.warning("sampling failed for %s: %s", model.name, e)
            draws = None
            failures.append(str(e))

        results.append(ModelComparison(
            model=model.name,
            parameter=model.parameter,
            optimum=optimum,
            posterior_mean=None if draws is None else {"alpha": draws.alpha.mean(),
                                                       "theta": draws.theta.mean()},
            closed_form=exact,
            acceptance_rate=None if draws is None else draws.acceptance_rate,
            failures=tuple(failures),
        ))
        if optimum is not None and draws is not None:
            logger.info("%s: optimum theta=%.4f (exact %s), mean theta=%.4f (exact %.4f)",
                        model.name, optimum["theta"], exact.mode, draws.theta.mean(), exact.mean)
    return results


def run_experiment(config: ExperimentConfig | None = None,
                   engine: InferenceEngine | None = None) -> ExperimentReport:
    """Generate trials, summarize them, fit the three models, check the Jacobian."""
    config = config or ExperimentConfig()
    logger.info("running experiment %s", config)

    outcomes = generate_trials(config.n, config.theta, config.seed)
    summary = summarize(outcomes, config.prior_a, config.prior_b)
    comparisons = compare_parameterizations(
        outcomes,
        engine=engine,
        prior_a=config.prior_a,
        prior_b=config.prior_b,
        iterations=config.num_samples,
        burn_in=config.burn_in,
        proposal_std=config.proposal_std,
        rng_seed=config.seed + 1,
    )
    deviation = jacobian_check(sample_uniform_logodds(config.uniform_draws, config.seed + 2))
    return ExperimentReport(
        config=config,
        outcomes=outcomes,
        summary=summary,
        comparisons=comparisons,
        jacobian_deviation=deviation,
    )
