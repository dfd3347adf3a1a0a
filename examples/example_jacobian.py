"""
Example: what the Jacobian adjustment does to posterior modes
--------------------------------------------------------------

Simulates ten Bernoulli(0.3) trials and fits the same Beta(1, 1) /
Bernoulli model written three ways:

    1. theta declared in (0, 1)
    2. alpha = logit(theta) declared, Beta prior on inv_logit(alpha) unadjusted
    3. alpha declared, prior plus log |d theta / d alpha|

The optimizer returns the MLE for models 1 and 2 and the Beta posterior mean
for model 3; sampling recovers the posterior mean (s + 1) / (N + 2) for
models 1 and 3 and s / N for model 2, whose implied prior is no longer uniform.
"""

import logging

from reparam import ExperimentConfig, format_report, run_experiment


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)

    report = run_experiment(ExperimentConfig(n=10, theta=0.3, seed=123))
    print(format_report(report))
