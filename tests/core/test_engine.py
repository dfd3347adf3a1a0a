import numpy as np
import pytest
from prefect import Task

from reparam.core import (
    InferenceEngine,
    LogOddsModel,
    MCMC,
    MetropolisHastings,
    Optimizer,
    PosteriorDraws,
    ProbabilityModel,
    make_data,
)
from reparam.errors import InferenceError
from reparam.transforms import logit


ITERATIONS = 8_000
BURN_IN = 1_000


@pytest.fixture(scope="module")
def four_data():
    return make_data([1, 0, 0, 1, 0, 0, 0, 1, 0, 1])


@pytest.fixture(scope="module")
def draws(engine, four_data):
    models = {
        "theta": ProbabilityModel(),
        "unadjusted": LogOddsModel(jacobian_adjustment=False),
        "adjusted": LogOddsModel(jacobian_adjustment=True),
    }
    return {
        key: engine.run_sample(model=model, data=four_data, iterations=ITERATIONS,
                            burn_in=BURN_IN, rng=np.random.default_rng(2024))
        for key, model in models.items()
    }


# ------------------------------- Optimizer -------------------------------

def test_optimize_probability_model(engine, four_data):
    out = engine.run_optimize(model=ProbabilityModel(), data=four_data)
    assert out["theta"] == pytest.approx(0.4, abs=1e-6)
    assert set(out) == {"alpha", "theta", "log_density"}


def test_optimize_unadjusted_logodds_model(engine, four_data):
    out = engine.run_optimize(model=LogOddsModel(jacobian_adjustment=False), data=four_data)
    assert out["alpha"] == pytest.approx(logit(0.4), abs=1e-6)
    assert out["theta"] == pytest.approx(0.4, abs=1e-6)


def test_optimize_adjusted_logodds_model(engine, four_data):
    out = engine.run_optimize(model=LogOddsModel(jacobian_adjustment=True), data=four_data)
    assert out["alpha"] == pytest.approx(logit(5 / 12), abs=1e-6)
    assert out["theta"] == pytest.approx(5 / 12, abs=1e-6)


def test_optimize_matches_closed_form(engine, four_data):
    for model in (ProbabilityModel(2.0, 2.0), LogOddsModel(3.0, 1.5)):
        out = engine.run_optimize(model=model, data=four_data)
        assert out["theta"] == pytest.approx(model.closed_form(four_data).mode, abs=1e-6)


def test_optimize_without_interior_optimum(engine):
    data = make_data([1, 1, 1, 1])
    with pytest.raises(InferenceError):
        engine.run_optimize(model=ProbabilityModel(), data=data)


def test_optimize_task_fn(engine, four_data):
    assert isinstance(engine.optimize, Task)
    out = engine.optimize.fn(model=ProbabilityModel(), data=four_data)
    assert out["theta"] == pytest.approx(0.4, abs=1e-6)
    with pytest.raises(TypeError):
        engine.optimize.fn(model="theta", data=four_data)


def test_optimizer_rejects_empty_bounds(four_data):
    with pytest.raises(ValueError):
        Optimizer()._optimize(model=ProbabilityModel(), data=four_data, bounds=(1.0, 1.0))


# -------------------------------- Sampling --------------------------------

@pytest.mark.parametrize("key, expected", [
    ("theta", 5 / 12),
    ("unadjusted", 0.4),
    ("adjusted", 5 / 12),
])
def test_sample_posterior_mean(draws, key, expected):
    result = draws[key]
    assert isinstance(result, PosteriorDraws)
    assert result.theta.n == ITERATIONS
    assert result.theta.mean() == pytest.approx(expected, abs=0.02)


def test_sampled_theta_is_inv_logit_of_alpha(draws):
    result = draws["theta"]
    np.testing.assert_allclose(result.theta.samples, 1 / (1 + np.exp(-result.alpha.samples)))
    assert np.all((result.theta.samples > 0) & (result.theta.samples < 1))


def test_acceptance_rate(draws):
    for result in draws.values():
        assert 0.1 < result.acceptance_rate < 0.95


def test_summary(draws):
    summary = draws["adjusted"].summary(level=0.9)
    assert set(summary) == {"alpha", "theta"}
    theta = summary["theta"]
    assert theta["lower"] < theta["median"] < theta["upper"]
    assert theta["sd"] == pytest.approx(np.sqrt(35 / (144 * 13)), abs=0.02)


def test_sampling_is_reproducible(engine, four_data):
    kwargs = dict(model=ProbabilityModel(), data=four_data, iterations=500, burn_in=50)
    a = engine.run_sample(rng=7, **kwargs)
    b = engine.run_sample(rng=7, **kwargs)
    np.testing.assert_array_equal(a.alpha.samples, b.alpha.samples)
    c = engine.run_sample(rng=8, **kwargs)
    assert not np.array_equal(a.alpha.samples, c.alpha.samples)


def test_sampling_all_failures_with_jacobian(engine):
    # no interior optimum, but the Jacobian-adjusted posterior is proper
    data = make_data([0, 0, 0, 0, 0])
    result = engine.run_sample(model=ProbabilityModel(), data=data, iterations=4000,
                            burn_in=500, rng=np.random.default_rng(1))
    assert result.theta.mean() == pytest.approx(1 / 7, abs=0.03)


def test_default_burn_in(four_data):
    mcmc = MCMC(sampler=MetropolisHastings())
    result = mcmc._calculate_posterior(model=ProbabilityModel(), data=four_data,
                                       num_samples=400, rng=3)
    assert result.alpha.n == 400
    with pytest.raises(ValueError):
        mcmc._calculate_posterior(model=ProbabilityModel(), data=four_data,
                                  num_samples=400, burn_in=-1)


# --------------------------- Metropolis-Hastings ---------------------------

def test_metropolis_hastings_standard_normal():
    mh = MetropolisHastings()
    chain = mh._sample_posterior(log_target=lambda x: -0.5 * x * x, num_samples=20_000,
                                 initial_state=0.0, proposal_std=2.0, rng=11)
    assert chain.draws.shape == (20_000,)
    assert chain.draws.mean() == pytest.approx(0.0, abs=0.1)
    assert chain.draws.std() == pytest.approx(1.0, abs=0.1)


def test_metropolis_hastings_task_fn():
    mh = MetropolisHastings()
    chain = mh.sample_posterior.fn(log_target=lambda x: -abs(x), num_samples=10,
                                   initial_state=0.0, rng=0)
    assert chain.draws.shape == (10,)


@pytest.mark.parametrize("kwargs", [
    dict(num_samples=0),
    dict(num_samples=10, proposal_std=0.0),
])
def test_metropolis_hastings_rejects_settings(kwargs):
    mh = MetropolisHastings()
    with pytest.raises(ValueError):
        mh._sample_posterior(log_target=lambda x: 0.0, initial_state=0.0, **kwargs)


def test_metropolis_hastings_requires_finite_start():
    mh = MetropolisHastings()
    with pytest.raises(InferenceError):
        mh._sample_posterior(log_target=lambda x: -np.inf, num_samples=5, initial_state=0.0)


def test_default_engine():
    engine = InferenceEngine.default()
    assert isinstance(engine.sample, Task)


# ------------------------------ Direct calls ------------------------------

def test_run_optimize_and_run_sample(engine, four_data):
    out = engine.run_optimize(ProbabilityModel(), four_data)
    assert out["theta"] == pytest.approx(0.4, abs=1e-6)
    result = engine.run_sample(LogOddsModel(), four_data, 300, burn_in=50, rng=4)
    assert isinstance(result, PosteriorDraws)
    assert result.alpha.n == 300
    with pytest.raises(InferenceError):
        engine.run_optimize(ProbabilityModel(), make_data([0, 0]))


def test_chain_acceptance_rate_counts_accepted_steps():
    chain = MetropolisHastings()._sample_posterior(log_target=lambda x: -0.5 * x * x, num_samples=2_000,
                                                   initial_state=0.0, rng=5)
    assert chain.accepted.shape == (2_000,)
    assert chain.acceptance_rate == pytest.approx(chain.accepted.mean())


def test_acceptance_rate_excludes_burn_in(four_data):
    # start far out so that the burn-in moves differ from the kept ones
    mcmc = MCMC(sampler=MetropolisHastings())
    result = mcmc._calculate_posterior(model=ProbabilityModel(), data=four_data, num_samples=1_000,
                                       initial_param=8.0, burn_in=200, rng=6)
    moved = np.mean(np.diff(result.alpha.samples) != 0)
    assert result.acceptance_rate == pytest.approx(moved, abs=2 / 1_000)
    with pytest.raises(ValueError):
        mcmc._calculate_posterior(model=ProbabilityModel(), data=four_data, num_samples=0)
