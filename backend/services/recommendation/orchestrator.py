"""Recommendation orchestrator: turns a seeker and a corpus into ranked results.

Flow:
    seeker profile + active jobs + active resources
      ├─ extract_seeker()                   → SeekerFeatureSet   (fatal on error)
      ├─ extract_candidate() per record     → CandidateFeatureSet (skipped on error)
      │       ↓
      ├─ score jobs (thread pool, batched)  → MatchResult[]
      ├─ aggregate_gaps(job results)        → gap report, stored on the seeker
      ├─ score resources against the gaps   → MatchResult[]
      │       ↓
      └─ filter → select page               → RecommendationResult

Ranked batches are cached per (seeker, profile version, corpus version, day)
so paging through the same list does not rescore the corpus.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from config import Settings, settings as default_settings
from models.schemas.features import CandidateFeatureSet, SeekerFeatureSet
from models.schemas.match_result import (
    CandidateWarning,
    Diagnostics,
    GapEntry,
    MatchResult,
    RecommendationResult,
)
from services.recommendation.aggregator import aggregate
from services.recommendation.cache import RecommendationCache
from services.recommendation.errors import (
    CandidateExtractionFailed,
    CandidateNotFound,
    SeekerNotFound,
)
from services.recommendation.explanations import (
    MAX_REASONS,
    MIN_REASON_VALUE,
    explain,
    improvement_tips,
)
from services.recommendation.feature_extractor import extract_candidate, extract_seeker
from services.recommendation.ranker import filter_results, paginate
from services.recommendation.scorers import score_all
from services.recommendation.skill_gap import (
    aggregate_gaps,
    gap,
    gap_frequencies,
    single_candidate_gaps,
)
from services.recommendation.store import Record, RecommendationStore
from services.recommendation.strategy_registry import get_strategy

logger = logging.getLogger(__name__)


def score_candidate(
    seeker: SeekerFeatureSet,
    candidate: CandidateFeatureSet,
    gap_coverage_weight: float | None = None,
    max_reasons: int = MAX_REASONS,
    min_value: float = MIN_REASON_VALUE,
) -> MatchResult:
    """Score, explain and gap-check one candidate. Pure."""
    score, sub_scores = aggregate(score_all(seeker, candidate, gap_coverage_weight))
    skills_gap = sorted(gap(seeker.skills, candidate.required_skills))
    return MatchResult(
        candidate_id=candidate.candidate_id,
        kind=candidate.kind,
        title=candidate.title,
        score=score,
        sub_scores=sub_scores,
        reasons=explain(sub_scores, candidate, max_reasons=max_reasons, min_value=min_value),
        skills_gap=skills_gap,
        matched_skills=sorted(seeker.skills & candidate.required_skills),
        areas_of_improvement=improvement_tips(seeker, candidate, skills_gap),
    )


class RankedBatch(BaseModel):
    """Every scored candidate for one seeker, before filtering and paging."""
    results: list[MatchResult] = []
    gap_report: list[GapEntry] = []
    warnings: list[CandidateWarning] = []
    partial: bool = False


class RecommendationOrchestrator:
    def __init__(
        self,
        store: RecommendationStore | None = None,
        settings: Settings = default_settings,
        cache: RecommendationCache | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        if cache is None and settings.cache_enabled:
            cache = RecommendationCache(max_entries=settings.cache_max_entries)
        self.cache = cache

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def recommend(
        self,
        seeker_id: str,
        kind: str | None = None,
        page: int = 1,
        page_size: int | None = None,
        as_of: datetime | None = None,
    ) -> RecommendationResult:
        """Ranked jobs and resources for a stored seeker, one page at a time."""
        started = time.perf_counter()
        as_of = as_of or datetime.now(timezone.utc)
        store = self._require_store()

        profile = store.get_profile(seeker_id)
        if profile is None:
            raise SeekerNotFound(seeker_id)
        seeker = extract_seeker(profile, as_of)

        key = self._cache_key(seeker_id, as_of)
        batch = self.cache.get(key) if key and self.cache is not None else None
        cache_hit = batch is not None
        if batch is None:
            batch = await self._rank(seeker, store.list_active_jobs(), store.list_active_resources())
            if key and self.cache is not None and not batch.partial:
                self.cache.put(key, batch)
        else:
            logger.debug("Cache hit for seeker %s", seeker_id)

        return self._to_result(seeker_id, batch, kind, page, page_size, started, cache_hit)

    async def preview(
        self,
        profile: Record,
        jobs: list[Record],
        resources: list[Record],
        kind: str | None = None,
        page: int = 1,
        page_size: int | None = None,
        as_of: datetime | None = None,
    ) -> RecommendationResult:
        """Rank an inline profile against an inline corpus. Nothing is cached."""
        started = time.perf_counter()
        seeker = extract_seeker(profile, as_of or datetime.now(timezone.utc))
        batch = await self._rank(
            seeker,
            [j for j in jobs if j.get("is_active", True)],
            [r for r in resources if r.get("is_active", True)],
        )
        return self._to_result(seeker.seeker_id, batch, kind, page, page_size, started, False)

    async def recommend_learning_for_job(
        self,
        seeker_id: str,
        job_id: str,
        limit: int = 5,
        as_of: datetime | None = None,
    ) -> RecommendationResult:
        """Learning resources that close the seeker's gap for one job.

        When the seeker already covers the job, resources are ranked on
        general fit instead.
        """
        started = time.perf_counter()
        as_of = as_of or datetime.now(timezone.utc)
        store = self._require_store()

        profile = store.get_profile(seeker_id)
        if profile is None:
            raise SeekerNotFound(seeker_id)
        raw_job = store.get_job(job_id)
        if raw_job is None:
            raise CandidateNotFound(job_id, "job")

        seeker = extract_seeker(profile, as_of)
        job = extract_candidate(raw_job, "job", self.settings.recency_window_days)
        job_result = self._score_one(seeker, job)
        report = single_candidate_gaps(job_result)

        resources, warnings = self._extract_all(store.list_active_resources(), "resource")
        if report:
            missing = set(job_result.skills_gap)
            resources = [r for r in resources if r.required_skills & missing]
        seeker = seeker.model_copy(update={"gap_skills": gap_frequencies(report)})

        deadline = time.monotonic() + self.settings.scoring_timeout_seconds
        results, batch_warnings, partial = await self._score_many(seeker, resources, deadline)
        batch = RankedBatch(
            results=results,
            gap_report=report,
            warnings=warnings + batch_warnings,
            partial=partial,
        )
        logger.info(
            "Learning for job %s: %d gap skills, %d resources",
            job_id, len(report), len(results),
        )
        return self._to_result(seeker_id, batch, "resource", 1, limit, started, False)

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    async def _rank(
        self,
        seeker: SeekerFeatureSet,
        raw_jobs: list[Record],
        raw_resources: list[Record],
    ) -> RankedBatch:
        deadline = time.monotonic() + self.settings.scoring_timeout_seconds

        jobs, warnings = self._extract_all(raw_jobs, "job")
        resources, resource_warnings = self._extract_all(raw_resources, "resource")
        warnings.extend(resource_warnings)

        job_results, batch_warnings, jobs_partial = await self._score_many(seeker, jobs, deadline)
        warnings.extend(batch_warnings)

        report = aggregate_gaps(job_results, min_score=self.settings.gap_relevance_threshold)
        seeker = seeker.model_copy(update={"gap_skills": gap_frequencies(report)})

        resource_results, batch_warnings, resources_partial = await self._score_many(
            seeker, resources, deadline
        )
        warnings.extend(batch_warnings)

        batch = RankedBatch(
            results=job_results + resource_results,
            gap_report=report,
            warnings=warnings,
            partial=jobs_partial or resources_partial,
        )
        logger.info(
            "Ranked %d jobs and %d resources for seeker %s (%d skipped, partial=%s)",
            len(job_results), len(resource_results), seeker.seeker_id,
            len(warnings), batch.partial,
        )
        return batch

    def _extract_all(
        self, records: list[Record], kind: str
    ) -> tuple[list[CandidateFeatureSet], list[CandidateWarning]]:
        candidates: list[CandidateFeatureSet] = []
        warnings: list[CandidateWarning] = []
        for record in records:
            try:
                candidates.append(
                    extract_candidate(record, kind, self.settings.recency_window_days)
                )
            except CandidateExtractionFailed as e:
                logger.warning("Skipping %s %s: %s", kind, e.candidate_id, e.reason)
                warnings.append(
                    CandidateWarning(candidate_id=e.candidate_id, kind=kind, reason=e.reason)
                )
        return candidates, warnings

    def _score_one(self, seeker: SeekerFeatureSet, candidate: CandidateFeatureSet) -> MatchResult:
        return score_candidate(
            seeker,
            candidate,
            gap_coverage_weight=self.settings.gap_coverage_weight,
            max_reasons=self.settings.max_reasons,
            min_value=self.settings.explanation_min_value,
        )

    def _score_batch(
        self, seeker: SeekerFeatureSet, batch: list[CandidateFeatureSet]
    ) -> list[MatchResult]:
        return [self._score_one(seeker, candidate) for candidate in batch]

    async def _score_many(
        self,
        seeker: SeekerFeatureSet,
        candidates: list[CandidateFeatureSet],
        deadline: float,
    ) -> tuple[list[MatchResult], list[CandidateWarning], bool]:
        """Score candidates in parallel batches until the deadline.

        Returns ``(results, warnings, partial)``. Batches still running at
        the deadline are abandoned and their candidates are left out.
        """
        if not candidates:
            return [], [], False

        size = max(1, self.settings.scoring_batch_size)
        batches = [candidates[i:i + size] for i in range(0, len(candidates), size)]

        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=self.settings.worker_count)
        try:
            futures = {
                loop.run_in_executor(executor, self._score_batch, seeker, batch): batch
                for batch in batches
            }
            timeout = max(0.0, deadline - time.monotonic())
            done, pending = await asyncio.wait(futures, timeout=timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        results: list[MatchResult] = []
        warnings: list[CandidateWarning] = []
        for future in done:
            exc = future.exception()
            if exc is None:
                results.extend(future.result())
                continue
            logger.warning("Scoring batch failed: %s", exc, exc_info=exc)
            warnings.extend(
                CandidateWarning(candidate_id=c.candidate_id, kind=c.kind, reason=str(exc))
                for c in futures[future]
            )

        for future in pending:
            future.cancel()
        if pending:
            logger.warning(
                "Scoring timed out: %d of %d batches unfinished", len(pending), len(batches)
            )
        return results, warnings, bool(pending)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_store(self) -> RecommendationStore:
        if self.store is None:
            raise RuntimeError("RecommendationOrchestrator has no store configured")
        return self.store

    def _cache_key(self, seeker_id: str, as_of: datetime) -> tuple[Any, ...] | None:
        profile_version = self.store.profile_version(seeker_id)
        corpus_version = self.store.corpus_version()
        if profile_version is None or corpus_version is None:
            return None
        return (seeker_id, profile_version, corpus_version, as_of.date().isoformat())

    def _to_result(
        self,
        seeker_id: str,
        batch: RankedBatch,
        kind: str | None,
        page: int,
        page_size: int | None,
        started: float,
        cache_hit: bool,
    ) -> RecommendationResult:
        """Map a ranked batch to one page of the public result."""
        page_size = min(page_size or self.settings.default_page_size, self.settings.max_page_size)
        diagnostics = Diagnostics(
            warnings=batch.warnings,
            scored=len(batch.results),
            skipped=len(batch.warnings),
            cache_hit=cache_hit,
        )

        if not batch.results:
            diagnostics.elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            return RecommendationResult(
                status="empty",
                seeker_id=seeker_id,
                page=page,
                page_size=page_size,
                partial=batch.partial,
                diagnostics=diagnostics,
            )

        eligible = filter_results(batch.results, kind=kind, min_score=self.settings.min_score)
        strategy = get_strategy(self.settings.selection_strategy)
        items, total = paginate(eligible, strategy, page, page_size)

        diagnostics.elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        return RecommendationResult(
            status="success",
            seeker_id=seeker_id,
            recommendations=items,
            gap_report=batch.gap_report,
            total=total,
            page=page,
            page_size=page_size,
            partial=batch.partial,
            diagnostics=diagnostics,
        )
