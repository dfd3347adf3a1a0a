import dataclasses

import numpy as np
import pytest

from reparam.errors import DomainError, InvalidInputError
from reparam.experiment import (
    ExperimentConfig,
    ModelComparison,
    compare_parameterizations,
    generate_trials,
    jacobian_check,
    run_experiment,
    sample_uniform_logodds,
    summarize,
)


# ---------------------------------------------------------------------
# generate_trials
# ---------------------------------------------------------------------

def test_generate_trials_is_deterministic():
    a = generate_trials(10, 0.3, 123)
    b = generate_trials(10, 0.3, 123)
    np.testing.assert_array_equal(a, b)
    assert a.shape == (10,)
    assert a.dtype.kind == "i"
    assert set(np.unique(a)) <= {0, 1}


def test_generate_trials_depends_on_seed():
    assert not np.array_equal(generate_trials(200, 0.3, 123), generate_trials(200, 0.3, 124))


def test_generate_trials_advances_a_shared_generator(rng):
    first = generate_trials(200, 0.5, rng)
    second = generate_trials(200, 0.5, rng)
    assert not np.array_equal(first, second)


def test_generate_trials_rate(rng):
    y = generate_trials(20_000, 0.3, rng)
    assert y.mean() == pytest.approx(0.3, abs=0.015)


def test_generate_trials_edges():
    assert generate_trials(0, 0.3, 1).shape == (0,)
    np.testing.assert_array_equal(generate_trials(5, 0.0, 1), np.zeros(5))
    np.testing.assert_array_equal(generate_trials(5, 1.0, 1), np.ones(5))


@pytest.mark.parametrize("n, theta", [
    (-1, 0.3),
    (2.5, 0.3),
    (10, 1.5),
    (10, -0.1),
    (10, np.nan),
])
def test_generate_trials_rejects(n, theta):
    with pytest.raises(DomainError):
        generate_trials(n, theta, 0)


# ---------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------

def test_summarize(four_of_ten):
    s = summarize(four_of_ten)
    assert (s.n, s.successes) == (10, 4)
    assert s.mle == 0.4
    assert (s.posterior_a, s.posterior_b) == (5.0, 7.0)
    assert s.posterior.mode == pytest.approx(0.4)
    assert s.posterior.mean == pytest.approx(5 / 12)
    assert s.mode_location is None


def test_summarize_records_boundary_mode():
    s = summarize([0, 0, 0])
    assert s.posterior.mode is None
    assert s.mode_location == 0.0
    assert s.posterior.mean == pytest.approx(0.2)

    s = summarize([1, 1])
    assert s.mode_location == 1.0


def test_summarize_with_prior(four_of_ten):
    s = summarize(four_of_ten, prior_a=2, prior_b=2)
    assert (s.posterior_a, s.posterior_b) == (6.0, 8.0)
    assert s.posterior.mode == pytest.approx(5 / 12)


def test_summarize_rejects_empty():
    with pytest.raises(InvalidInputError):
        summarize([])


# ---------------------------------------------------------------------
# Jacobian check
# ---------------------------------------------------------------------

def test_logodds_of_uniform_draws_are_logistic():
    draws = sample_uniform_logodds(400_000, 7)
    assert np.all(np.isfinite(draws))
    assert jacobian_check(draws) < 0.015


def test_jacobian_check_detects_wrong_density(rng):
    # uniform on the histogram span has density 1/12, far below 0.25 at zero
    assert jacobian_check(rng.uniform(-6.0, 6.0, size=50_000)) > 0.1


def test_jacobian_check_rejects():
    with pytest.raises(DomainError):
        jacobian_check([])
    with pytest.raises(DomainError):
        jacobian_check([0.0, 1.0], span=(1.0, -1.0))
    with pytest.raises(DomainError):
        sample_uniform_logodds(0, 1)


@pytest.mark.parametrize("bins", [0, -3, 2.5, True])
def test_jacobian_check_rejects_bins(bins):
    with pytest.raises(DomainError) as excinfo:
        jacobian_check([0.0, 0.5, -0.5], bins=bins)
    assert excinfo.value.param == "bins"


# ---------------------------------------------------------------------
# compare_parameterizations / run_experiment
# ---------------------------------------------------------------------

@pytest.fixture(scope="module")
def comparisons():
    return compare_parameterizations([1, 0, 0, 1, 0, 0, 0, 1, 0, 1],
                                     iterations=6_000, burn_in=1_000, rng_seed=11)


def test_compare_parameterizations(comparisons):
    assert len(comparisons) == 3
    assert [c.parameter for c in comparisons] == ["theta", "alpha", "alpha"]
    for c in comparisons:
        assert isinstance(c, ModelComparison)
        assert c.optimum["theta"] == pytest.approx(c.closed_form.mode, abs=1e-6)
        assert c.posterior_mean["theta"] == pytest.approx(c.closed_form.mean, abs=0.025)


def test_unadjusted_model_disagrees_with_conjugate_posterior(comparisons):
    theta_model, unadjusted, adjusted = comparisons
    assert theta_model.closed_form.mean == pytest.approx(5 / 12)
    assert unadjusted.closed_form.mean == pytest.approx(0.4)
    assert adjusted.closed_form.mode == pytest.approx(5 / 12)
    assert theta_model.optimum["theta"] == pytest.approx(0.4, abs=1e-6)


def test_compare_parameterizations_is_reproducible(engine):
    kwargs = dict(engine=engine, iterations=300, burn_in=50, rng_seed=5)
    a = compare_parameterizations([1, 0, 1, 1, 0], **kwargs)
    b = compare_parameterizations([1, 0, 1, 1, 0], **kwargs)
    assert [c.posterior_mean for c in a] == [c.posterior_mean for c in b]


def test_config_defaults():
    cfg = ExperimentConfig()
    assert (cfg.n, cfg.theta, cfg.seed) == (10, 0.3, 123)
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.n = 20


@pytest.mark.parametrize("kwargs, error", [
    (dict(n=0), DomainError),
    (dict(n=1.5), TypeError),
    (dict(theta=2.0), DomainError),
    (dict(proposal_std=0.0), DomainError),
    (dict(burn_in=-1), DomainError),
    (dict(num_samples=0), DomainError),
    (dict(prior_a=0.0), DomainError),
    (dict(seed=True), TypeError),
    (dict(seed=-1), DomainError),
])
def test_config_validation(kwargs, error):
    with pytest.raises(error):
        ExperimentConfig(**kwargs)


def test_run_experiment(engine):
    cfg = ExperimentConfig(n=200, theta=0.3, seed=9, num_samples=2_000, burn_in=500,
                           uniform_draws=20_000)
    report = run_experiment(cfg, engine=engine)
    assert report.config is cfg
    assert report.outcomes.shape == (200,)
    np.testing.assert_array_equal(report.outcomes, generate_trials(200, 0.3, 9))
    assert report.summary.n == 200
    assert len(report.comparisons) == 3
    assert report.jacobian_deviation < 0.05


def test_generate_trials_rejects_negative_seed():
    with pytest.raises(DomainError) as excinfo:
        generate_trials(5, 0.3, -1)
    assert excinfo.value.param == "seed"


# ---------------------------------------------------------------------
# data without successes or without failures
# ---------------------------------------------------------------------

def test_compare_parameterizations_records_failures(engine):
    theta_model, unadjusted, adjusted = compare_parameterizations(
        [0, 0, 0], engine=engine, iterations=2_000, burn_in=500, rng_seed=3)

    # flat prior, no successes: the density over theta peaks at the boundary
    assert theta_model.optimum is None
    assert theta_model.failures
    assert theta_model.posterior_mean["theta"] == pytest.approx(0.2, abs=0.05)
    assert theta_model.closed_form.mode is None

    # Beta(1, 4) leaves the unadjusted posterior over alpha improper
    assert unadjusted.closed_form is None
    assert unadjusted.optimum is None and unadjusted.posterior_mean is None
    assert unadjusted.acceptance_rate is None
    assert "improper" in unadjusted.failures[0]

    assert adjusted.failures == ()
    assert adjusted.optimum["theta"] == pytest.approx(0.2, abs=1e-6)


@pytest.mark.parametrize("theta, expected", [(0.0, 1 / 3), (1.0, 2 / 3)])
def test_run_experiment_single_degenerate_trial(engine, theta, expected):
    cfg = ExperimentConfig(n=1, theta=theta, seed=0, num_samples=500, burn_in=100,
                           uniform_draws=5_000)
    report = run_experiment(cfg, engine=engine)
    np.testing.assert_array_equal(report.outcomes, [int(theta)])
    assert report.summary.posterior.mode is None

    theta_model, unadjusted, adjusted = report.comparisons
    assert theta_model.optimum is None and theta_model.failures
    assert unadjusted.closed_form is None
    assert adjusted.optimum["theta"] == pytest.approx(expected, abs=1e-6)
    assert adjusted.closed_form.mean == pytest.approx(expected)
