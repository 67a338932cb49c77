"""Abstract base class for top-K selection strategies."""

from abc import ABC, abstractmethod
import logging

from models.schemas.match_result import MatchResult

logger = logging.getLogger(__name__)


def rank_key(result: MatchResult) -> tuple[float, int, str, str]:
    """Total order over results: score desc, matched skills desc, id asc.

    Kind is the last resort so a job and a resource sharing an id still
    have a fixed order.
    """
    return (-result.score, -len(result.matched_skills), result.candidate_id, result.kind)


class SelectionStrategy(ABC):
    """Selects the ``limit`` best results in ``rank_key`` order.

    Subclasses must implement:
        - name: identifier used in the strategy registry
        - select(results, limit): return the first ``limit`` results, ordered

    Every strategy must return exactly what ``sorted(results, key=rank_key)[:limit]``
    would, so strategies can be swapped without changing output order.
    """

    name: str = ""

    @abstractmethod
    def select(self, results: list[MatchResult], limit: int) -> list[MatchResult]:
        """Return the top ``limit`` results, best first."""

    def select_page(
        self, results: list[MatchResult], page: int, page_size: int
    ) -> list[MatchResult]:
        """Results for a 1-based page."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be >= 1")
        offset = (page - 1) * page_size
        top = self.select(results, offset + page_size)
        logger.debug("%s selected %d of %d results", self.name, len(top), len(results))
        return top[offset:]
