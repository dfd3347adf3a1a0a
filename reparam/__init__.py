"""
reparam: reparameterization, Jacobian adjustment and Beta-Bernoulli estimators.
"""

from .errors import (
    ReparamError,
    DomainError,
    InvalidInputError,
    BoundaryModeError,
    InferenceError,
)
from .transforms import (
    logit,
    inv_logit,
    logistic_pdf,
    logistic_cdf,
    log_logistic_pdf,
    log_inv_logit,
    log1m_inv_logit,
    odds,
)
from .estimators import (
    PointEstimate,
    validate_outcomes,
    mle_bernoulli,
    beta_posterior_params,
    beta_mean,
    beta_mode,
    beta_variance,
    beta_credible_interval,
    beta_logodds_mode,
)
from .distributions import Distribution, EmpiricalDistribution, Beta, LogOddsBeta
from .core import (
    Module,
    InputSpec,
    make_data,
    BernoulliLikelihood,
    BernoulliModel,
    ProbabilityModel,
    LogOddsModel,
    MetropolisHastings,
    MCMC,
    Optimizer,
    InferenceEngine,
    PosteriorDraws,
)
from .experiment import (
    TrialSummary,
    ModelComparison,
    ExperimentConfig,
    ExperimentReport,
    generate_trials,
    summarize,
    sample_uniform_logodds,
    jacobian_check,
    compare_parameterizations,
    run_experiment,
)
from .report import format_summary, format_comparison, format_report

__version__ = "0.1.0"
