"""Skill-gap analysis per candidate and across a scored batch."""

import logging
from collections import Counter
from collections.abc import Iterable

from models.schemas.match_result import GapEntry, MatchResult

logger = logging.getLogger(__name__)

# Only candidates at least this relevant contribute to the gap report
GAP_RELEVANCE_THRESHOLD = 0.3


def gap(seeker_skills: frozenset[str], required_skills: frozenset[str]) -> frozenset[str]:
    """Required skills the seeker does not have."""
    return frozenset(required_skills - seeker_skills)


def aggregate_gaps(
    results: Iterable[MatchResult],
    min_score: float = GAP_RELEVANCE_THRESHOLD,
    limit: int | None = None,
) -> list[GapEntry]:
    """Count missing skills across relevant results.

    Sorted by frequency descending, then alphabetically, so the report does
    not depend on the order the results arrive in.
    """
    counts: Counter[str] = Counter()
    for result in results:
        if result.score >= min_score:
            counts.update(result.skills_gap)
    report = [
        GapEntry(skill=skill, frequency=freq)
        for skill, freq in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    if limit is not None:
        report = report[:limit]
    logger.debug("Gap report: %d skills from %d counted gaps", len(report), sum(counts.values()))
    return report


def single_candidate_gaps(result: MatchResult) -> list[GapEntry]:
    """Gap report for one job, used for job-specific learning recommendations."""
    return [GapEntry(skill=skill, frequency=1) for skill in sorted(result.skills_gap)]


def gap_frequencies(report: list[GapEntry]) -> dict[str, int]:
    return {entry.skill: entry.frequency for entry in report}
