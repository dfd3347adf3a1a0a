"""
Example: optimize and sample one model inside a Prefect flow
-------------------------------------------------------------

The engine's ``optimize`` and ``sample`` run functions are Prefect tasks, so
they can be composed in a flow like any other task.

Model:
    theta = inv_logit(alpha) ~ Beta(1, 1)   (Jacobian adjusted)
    y_i   ~ Bernoulli(theta)

With 4 successes out of 10 the posterior over alpha peaks at logit(5/12),
the Beta(5, 7) mean, and the posterior mean of theta is 5/12 as well.
"""

import logging

from prefect import flow

from reparam import InferenceEngine, LogOddsModel, make_data, logit


@flow
def fit_logodds(outcomes):
    engine = InferenceEngine.default()
    model = LogOddsModel(jacobian_adjustment=True)
    data = make_data(outcomes)
    optimum = engine.optimize(model=model, data=data)
    draws = engine.sample(model=model, data=data, iterations=5000, rng=2024)
    return optimum, draws


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    optimum, draws = fit_logodds([1, 0, 0, 1, 0, 0, 0, 1, 0, 1])

    print("Posterior mode of alpha:", optimum["alpha"], "(exact", logit(5 / 12), ")")
    print("Posterior mean of theta:", draws.theta.mean(), "(exact", 5 / 12, ")")
    print("Summary:", draws.summary())
