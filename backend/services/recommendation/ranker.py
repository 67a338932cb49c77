"""Ranking and top-K selection of scored candidates."""

import heapq
import logging

from models.schemas.match_result import MatchResult
from services.recommendation.base import SelectionStrategy, rank_key

logger = logging.getLogger(__name__)


class SortSelection(SelectionStrategy):
    """Full sort. Fine for corpora of hundreds to low thousands."""

    name = "sort"

    def select(self, results: list[MatchResult], limit: int) -> list[MatchResult]:
        return sorted(results, key=rank_key)[:limit]


class HeapSelection(SelectionStrategy):
    """Partial selection in O(n log k) for small K over large corpora."""

    name = "heap"

    def select(self, results: list[MatchResult], limit: int) -> list[MatchResult]:
        if limit <= 0:
            return []
        return heapq.nsmallest(limit, results, key=rank_key)


def filter_results(
    results: list[MatchResult],
    kind: str | None = None,
    min_score: float = 0.0,
) -> list[MatchResult]:
    """Keep results of the requested kind scoring at least ``min_score``."""
    return [
        r for r in results
        if (kind is None or r.kind == kind) and r.score >= min_score
    ]


def paginate(
    results: list[MatchResult],
    strategy: SelectionStrategy,
    page: int,
    page_size: int,
) -> tuple[list[MatchResult], int]:
    """Return ``(page_items, total)`` for a 1-based page."""
    return strategy.select_page(results, page, page_size), len(results)
