
import pytest
import numpy as np
from reparam.core import InferenceEngine, make_data
from reparam.distributions import EmpiricalDistribution

@pytest.fixture
def rng():
    return np.random.default_rng(42)

@pytest.fixture
def four_of_ten():
    # four successes in ten trials
    return np.array([1, 0, 0, 1, 0, 0, 0, 1, 0, 1])

@pytest.fixture
def data(four_of_ten):
    return make_data(four_of_ten)

@pytest.fixture
def theta_grid():
    return np.linspace(0.001, 0.999, 999)

@pytest.fixture(scope="module")
def engine():
    return InferenceEngine.default()

@pytest.fixture
def simple_samples():
    return np.array([[1.0], [2.0], [3.0]])

@pytest.fixture
def empirical(simple_samples, rng):
    return EmpiricalDistribution(simple_samples, rng=rng)
