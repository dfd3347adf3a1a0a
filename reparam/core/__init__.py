from .module import Module, InputSpec
from .models import (
    make_data,
    validate_data,
    BernoulliLikelihood,
    BernoulliModel,
    ProbabilityModel,
    LogOddsModel,
)
from .mcmc import Chain, PosteriorDraws, MetropolisHastings, MCMC
from .engine import Optimizer, InferenceEngine
