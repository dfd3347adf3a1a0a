import numpy as np
import pytest

from reparam.distributions import Beta, EmpiricalDistribution


# ------------------------------- Basics --------------------------------

def test_init_rejects_bad_weights_shape_and_values():
    X = np.array([0.0, 1.0, 2.0], dtype=float)

    # Wrong shape
    with pytest.raises(ValueError):
        EmpiricalDistribution(X, weights=np.array([0.2, 0.8]))  # length 2 vs n=3

    # Negative weights
    with pytest.raises(ValueError):
        EmpiricalDistribution(X, weights=np.array([0.5, -0.2, 0.7]))

    # Sum to zero
    with pytest.raises(ValueError):
        EmpiricalDistribution(X, weights=np.array([0.0, 0.0, 0.0]))


def test_init_rejects_empty_and_non_finite():
    with pytest.raises(ValueError):
        EmpiricalDistribution(np.array([]))
    with pytest.raises(ValueError):
        EmpiricalDistribution(np.array([0.0, np.inf]))


def test_properties_and_moments():
    X = np.array([1.0, 3.0, 5.0], dtype=float)
    w = np.array([0.2, 0.3, 0.5], dtype=float)
    emp = EmpiricalDistribution(X, weights=w, rng=np.random.default_rng(0))

    assert emp.n == 3
    assert emp.samples.shape == (3,)
    assert emp.weights.shape == (3,)

    m_expected = (w * X).sum()
    v_expected = (w * (X - m_expected) ** 2).sum()
    assert isinstance(emp.mean(), float)
    assert np.isclose(emp.mean(), m_expected, rtol=0, atol=1e-12)
    assert np.isclose(emp.var(), v_expected, rtol=0, atol=1e-12)
    assert np.isclose(emp.std(), np.sqrt(v_expected), rtol=0, atol=1e-12)


def test_column_input_is_flattened(simple_samples):
    emp = EmpiricalDistribution(simple_samples)
    assert emp.samples.shape == (3,)
    assert emp.mean() == pytest.approx(2.0)


def test_weights_are_normalized():
    emp = EmpiricalDistribution([0.0, 1.0], weights=[1.0, 3.0])
    np.testing.assert_allclose(emp.weights, [0.25, 0.75])
    assert emp.mean() == pytest.approx(0.75)


# ------------------------------ Quantiles ------------------------------

def test_quantile_uniform_weights():
    emp = EmpiricalDistribution([4.0, 1.0, 3.0, 2.0])
    assert emp.quantile(0.0) == 1.0
    assert emp.quantile(0.5) == 2.0
    assert emp.quantile(1.0) == 4.0
    np.testing.assert_array_equal(emp.quantile([0.25, 0.75]), [1.0, 3.0])


def test_quantile_rejects_levels_outside_unit_interval():
    emp = EmpiricalDistribution([1.0, 2.0])
    with pytest.raises(ValueError):
        emp.quantile(1.5)


# ------------------------- Sampling & mapping --------------------------

def test_sample_is_reproducible():
    X = np.arange(10, dtype=float)
    a = EmpiricalDistribution(X, rng=np.random.default_rng(3)).sample(50)
    b = EmpiricalDistribution(X, rng=np.random.default_rng(3)).sample(50)
    assert a.shape == (50,)
    np.testing.assert_array_equal(a, b)
    assert np.all(np.isin(a, X))


def test_sample_follows_weights(rng):
    emp = EmpiricalDistribution([0.0, 1.0], weights=[0.1, 0.9], rng=rng)
    draws = emp.sample(20_000)
    assert draws.mean() == pytest.approx(0.9, abs=0.02)


def test_sample_without_replacement_limit():
    emp = EmpiricalDistribution([0.0, 1.0, 2.0])
    with pytest.raises(ValueError):
        emp.sample(4, replace=False)


def test_expectation_and_map():
    emp = EmpiricalDistribution([1.0, 2.0, 3.0], weights=[0.2, 0.3, 0.5])
    assert emp.expectation(lambda x: x ** 2) == pytest.approx(0.2 + 1.2 + 4.5)

    squared = emp.map(lambda x: x ** 2)
    np.testing.assert_allclose(squared.samples, [1.0, 4.0, 9.0])
    np.testing.assert_allclose(squared.weights, emp.weights)
    assert squared.mean() == pytest.approx(emp.expectation(lambda x: x ** 2))


def test_expectation_requires_elementwise_func():
    emp = EmpiricalDistribution([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        emp.expectation(lambda x: x.sum())


def test_from_distribution(rng):
    emp = EmpiricalDistribution.from_distribution(Beta(5, 7, rng=rng), num_samples=4000)
    assert emp.n == 4000
    assert emp.mean() == pytest.approx(5 / 12, abs=0.01)


def test_density_not_available(empirical):
    with pytest.raises(NotImplementedError):
        empirical.density(1.0)
