"""Simple forecasting over weighted scores.

- Least-squares line of weighted score against post index (1-based, in
  collection order).
- Sigmoid "success probability" of a post relative to the collection mean.
"""

from __future__ import annotations

import math

from backend.app.models.analytics import (
    PostPrediction,
    PredictionsResponse,
    RegressionPoint,
    RegressionResult,
    ScoredPost,
)

SUCCESS_STEEPNESS = 2.0


def engagement_regression(scored: list[ScoredPost]) -> RegressionResult:
    """Fit ``score = slope * index + intercept``; needs at least two points."""
    n = len(scored)
    if n < 2:
        return RegressionResult()

    xs = list(range(1, n + 1))
    ys = [s.weighted_score for s in scored]
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        points=[
            RegressionPoint(index=x, weighted_score=y, predicted=slope * x + intercept)
            for x, y in zip(xs, ys)
        ],
    )


def success_probability(score: float, mean_score: float) -> float:
    """Logistic squash of ``score / mean`` centred on 1.0, in [0, 1]."""
    if mean_score <= 0:
        return 0.0
    relative = score / mean_score
    probability = 1 / (1 + math.exp(-SUCCESS_STEEPNESS * (relative - 1)))
    return min(max(probability, 0.0), 1.0)


def build_predictions(scored: list[ScoredPost]) -> PredictionsResponse:
    mean = sum(s.weighted_score for s in scored) / len(scored) if scored else 0.0
    return PredictionsResponse(
        regression=engagement_regression(scored),
        posts=[
            PostPrediction(
                title=s.post.display_title,
                weighted_score=s.weighted_score,
                success_probability=success_probability(s.weighted_score, mean),
            )
            for s in scored
        ],
    )
