"""Weighted aggregation of sub-scores into one match score.

Base weights sum to 1.0 per candidate kind. Bonus dimensions (``keyword``
for jobs, ``gap_coverage`` for resources) are added on top, which is why
the aggregate is clamped to [0, 1].
"""

import logging
import math

import numpy as np

from models.schemas.match_result import SubScore

logger = logging.getLogger(__name__)

JOB_WEIGHTS: dict[str, float] = {
    "skills": 0.45,
    "experience": 0.15,
    "location": 0.15,
    "salary": 0.10,
    "category": 0.05,
    "recency": 0.10,
}

# Resources weight gap coverage, not overlap: the point is to teach what is missing
RESOURCE_WEIGHTS: dict[str, float] = {
    "skills": 0.70,
    "category": 0.15,
    "experience": 0.15,  # difficulty vs seeker level
}

# Keyword boost adds at most this much to the skills value
KEYWORD_BOOST_MAX = 0.1
DEFAULT_GAP_COVERAGE_WEIGHT = 0.25

BONUS_WEIGHTS: dict[str, dict[str, float]] = {
    "job": {"keyword": KEYWORD_BOOST_MAX * JOB_WEIGHTS["skills"]},
    "resource": {"gap_coverage": DEFAULT_GAP_COVERAGE_WEIGHT},
}

SCORE_PRECISION = 4


def weights_for(kind: str) -> dict[str, float]:
    """Base weight table for a candidate kind."""
    if kind == "job":
        return JOB_WEIGHTS
    if kind == "resource":
        return RESOURCE_WEIGHTS
    raise ValueError(f"Unknown candidate kind: {kind}")


def dimensions_for(kind: str) -> list[str]:
    """Base dimensions followed by bonus dimensions, in a fixed order."""
    return list(weights_for(kind)) + list(BONUS_WEIGHTS[kind])


def dimension_weight(kind: str, dimension: str) -> float:
    base = weights_for(kind)
    if dimension in base:
        return base[dimension]
    return BONUS_WEIGHTS[kind].get(dimension, 0.0)


def validate_weights() -> None:
    """Raise if a base weight table does not sum to 1.0."""
    for kind in ("job", "resource"):
        total = sum(weights_for(kind).values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"{kind} weights sum to {total}, expected 1.0")


def aggregate(sub_scores: list[SubScore]) -> tuple[float, list[SubScore]]:
    """Combine sub-scores into ``(score, sub_scores ordered by contribution)``.

    Pure and deterministic: ties in contribution fall back to dimension name.
    """
    if not sub_scores:
        return 0.0, []
    values = np.array([s.value for s in sub_scores], dtype=float)
    weights = np.array([s.weight for s in sub_scores], dtype=float)
    raw = float(np.dot(values, weights))
    score = round(float(np.clip(raw, 0.0, 1.0)), SCORE_PRECISION)
    ordered = sorted(sub_scores, key=lambda s: (-s.contribution, s.dimension))
    return score, ordered


validate_weights()
