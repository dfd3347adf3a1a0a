# report.py
"""Plain-text rendering of experiment results. Printing is left to the caller."""
from __future__ import annotations

from typing import Iterable, Optional

from .estimators import PointEstimate
from .experiment import ExperimentReport, ModelComparison, TrialSummary

__all__ = [
    "format_summary",
    "format_comparison",
    "format_report",
]


def _fmt(x: Optional[float], width: int = 9) -> str:
    if x is None:
        return f"{'-':>{width}}"
    return f"{x:>{width}.4f}"


def format_summary(summary: TrialSummary) -> str:
    if summary.posterior.mode is not None:
        mode = f"{summary.posterior.mode:.4f}"
    elif summary.mode_location is not None:
        mode = f"at boundary {summary.mode_location:g}"
    else:
        mode = "no unique mode"
    lines = [
        f"trials:            N = {summary.n}, successes = {summary.successes}",
        f"MLE:               {summary.mle:.4f}",
        f"Beta posterior:    a = {summary.posterior_a:g}, b = {summary.posterior_b:g}",
        f"posterior mode:    {mode}",
        f"posterior mean:    {summary.posterior.mean:.4f}",
    ]
    return "\n".join(lines)


def format_comparison(comparisons: Iterable[ModelComparison]) -> str:
    """One row per model: optimizer and sampler results against exact values (theta scale).

    Missing results print as ``-``; the reasons follow the table.
    """
    header = (f"{'model':<26}{'opt theta':>10}{'exact':>10}"
              f"{'mean theta':>11}{'exact':>10}{'opt alpha':>10}{'accept':>8}")
    rows = [header, "-" * len(header)]
    notes = []
    for c in comparisons:
        optimum = c.optimum or {}
        mean = c.posterior_mean or {}
        exact = c.closed_form or PointEstimate(mode=None, mean=None)
        accept = f"{c.acceptance_rate:>8.2f}" if c.acceptance_rate is not None else f"{'-':>8}"
        rows.append(
            f"{c.model:<26}{_fmt(optimum.get('theta'), 10)}{_fmt(exact.mode, 10)}"
            f"{_fmt(mean.get('theta'), 11)}{_fmt(exact.mean, 10)}"
            f"{_fmt(optimum.get('alpha'), 10)}{accept}"
        )
        notes += [f"{c.model}: {reason}" for reason in c.failures]
    if notes:
        rows += [""] + notes
    return "\n".join(rows)


def format_report(report: ExperimentReport) -> str:
    cfg = report.config
    parts = [
        f"Bernoulli trials: n = {cfg.n}, theta = {cfg.theta:g}, seed = {cfg.seed}",
        "outcomes: " + " ".join(str(int(v)) for v in report.outcomes),
        "",
        format_summary(report.summary),
    ]
    if report.comparisons:
        parts += ["", format_comparison(report.comparisons)]
    if report.jacobian_deviation is not None:
        parts += [
            "",
            f"logit(Uniform) vs logistic density, max deviation: {report.jacobian_deviation:.4f}",
        ]
    return "\n".join(parts)
