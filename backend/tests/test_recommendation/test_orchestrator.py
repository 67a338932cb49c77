"""Tests for the recommendation orchestrator."""

import time

import pytest

from config import Settings
from models.schemas.match_result import RecommendationResult
from services.recommendation.errors import CandidateNotFound, InvalidProfile, SeekerNotFound
from services.recommendation.feature_extractor import extract_candidate, extract_seeker
from services.recommendation.orchestrator import RecommendationOrchestrator, score_candidate
from services.recommendation.store import InMemoryStore

PROFILE = {
    "id": "s1",
    "skills": ["JavaScript", "HTML", "CSS"],
    "location": "Lagos",
    "job_preferences": {"remote_preference": "flexible"},
}

JOBS = [
    {"id": "j1", "title": "React Developer", "skills": ["React", "JavaScript", "Node.js"]},
    {"id": "j2", "title": "Web Developer", "skills": ["HTML", "CSS", "JavaScript"]},
    {"id": "j3", "title": "Django Developer", "skills": ["Python", "Django"], "is_active": False},
]

RESOURCES = [
    {"id": "r1", "title": "React Basics", "skills": ["React"]},
    {"id": "r2", "title": "Spreadsheets 101", "skills": ["Excel"]},
]


def _store(jobs=JOBS, resources=RESOURCES, profile=PROFILE):
    store = InMemoryStore()
    store.put_profile(profile)
    for job in jobs:
        store.put_job(job)
    for resource in resources:
        store.put_resource(resource)
    return store


def _ids(result: RecommendationResult) -> list[str]:
    return [r.candidate_id for r in result.recommendations]


@pytest.fixture
def no_cache():
    return Settings(cache_enabled=False)


class TestRecommend:
    @pytest.mark.asyncio
    async def test_ranked_jobs_and_resources(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        result = await orch.recommend("s1", page_size=10, as_of=as_of)

        assert result.status == "success"
        assert result.total == 4
        assert _ids(result) == ["r1", "j2", "j1", "r2"]
        assert all(0.0 <= r.score <= 1.0 for r in result.recommendations)
        assert all(r.reasons for r in result.recommendations if r.score > 0)

    @pytest.mark.asyncio
    async def test_skill_gap_and_report(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        result = await orch.recommend("s1", page_size=10, as_of=as_of)

        j1 = next(r for r in result.recommendations if r.candidate_id == "j1")
        assert j1.skills_gap == ["node", "react"]
        assert j1.matched_skills == ["javascript"]
        skills = next(s for s in j1.sub_scores if s.dimension == "skills")
        assert skills.value == pytest.approx(1 / 3, abs=1e-4)
        assert [(g.skill, g.frequency) for g in result.gap_report] == [("node", 1), ("react", 1)]

    @pytest.mark.asyncio
    async def test_resource_covering_gap_ranks_first(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        result = await orch.recommend("s1", kind="resource", as_of=as_of)

        assert _ids(result) == ["r1", "r2"]
        assert result.total == 2
        assert any("Teaches skills you are missing" in reason
                   for reason in result.recommendations[0].reasons)

    @pytest.mark.asyncio
    async def test_pagination(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        first = await orch.recommend("s1", page=1, page_size=2, as_of=as_of)
        second = await orch.recommend("s1", page=2, page_size=2, as_of=as_of)

        assert _ids(first) + _ids(second) == ["r1", "j2", "j1", "r2"]
        assert first.total == second.total == 4

    @pytest.mark.asyncio
    async def test_page_size_capped(self, as_of):
        orch = RecommendationOrchestrator(_store(), settings=Settings(max_page_size=3))
        result = await orch.recommend("s1", page_size=100, as_of=as_of)
        assert result.page_size == 3
        assert len(result.recommendations) == 3

    @pytest.mark.asyncio
    async def test_min_score_filter(self, as_of):
        orch = RecommendationOrchestrator(_store(), settings=Settings(min_score=0.5, cache_enabled=False))
        result = await orch.recommend("s1", as_of=as_of)
        assert _ids(result) == ["r1", "j2"]

    @pytest.mark.asyncio
    async def test_heap_strategy_same_order(self, as_of):
        sort_orch = RecommendationOrchestrator(_store(), settings=Settings(cache_enabled=False))
        heap_orch = RecommendationOrchestrator(
            _store(), settings=Settings(selection_strategy="heap", cache_enabled=False)
        )
        a = await sort_orch.recommend("s1", page_size=10, as_of=as_of)
        b = await heap_orch.recommend("s1", page_size=10, as_of=as_of)
        assert _ids(a) == _ids(b)

    @pytest.mark.asyncio
    async def test_idempotent(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        a = await orch.recommend("s1", page_size=10, as_of=as_of)
        b = await orch.recommend("s1", page_size=10, as_of=as_of)
        assert a.recommendations == b.recommendations
        assert a.gap_report == b.gap_report

    @pytest.mark.asyncio
    async def test_corpus_order_does_not_matter(self, as_of, no_cache):
        forward = RecommendationOrchestrator(_store(), settings=no_cache)
        backward = RecommendationOrchestrator(
            _store(jobs=list(reversed(JOBS)), resources=list(reversed(RESOURCES))),
            settings=Settings(cache_enabled=False, scoring_batch_size=1),
        )
        a = await forward.recommend("s1", page_size=10, as_of=as_of)
        b = await backward.recommend("s1", page_size=10, as_of=as_of)
        assert a.recommendations == b.recommendations
        assert a.gap_report == b.gap_report

    @pytest.mark.asyncio
    async def test_equal_scores_ordered_by_id(self, as_of, no_cache):
        jobs = [
            {"id": "b-job", "skills": ["JavaScript"]},
            {"id": "a-job", "skills": ["JavaScript"]},
        ]
        orch = RecommendationOrchestrator(_store(jobs=jobs, resources=[]), settings=no_cache)
        result = await orch.recommend("s1", as_of=as_of)
        assert _ids(result) == ["a-job", "b-job"]


class TestEmptyAndErrors:
    @pytest.mark.asyncio
    async def test_empty_corpus(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(jobs=[], resources=[]), settings=no_cache)
        result = await orch.recommend("s1", as_of=as_of)

        assert result.status == "empty"
        assert result.recommendations == []
        assert result.gap_report == []
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_unknown_seeker(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        with pytest.raises(SeekerNotFound):
            await orch.recommend("nobody", as_of=as_of)

    @pytest.mark.asyncio
    async def test_invalid_profile(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(profile={"id": "s1", "skills": 5}), settings=no_cache)
        with pytest.raises(InvalidProfile):
            await orch.recommend("s1", as_of=as_of)

    @pytest.mark.asyncio
    async def test_malformed_candidate_skipped(self, as_of, no_cache):
        jobs = JOBS + [{"id": "j9", "salary": "lots"}]
        orch = RecommendationOrchestrator(_store(jobs=jobs), settings=no_cache)
        result = await orch.recommend("s1", page_size=10, as_of=as_of)

        assert result.status == "success"
        assert "j9" not in _ids(result)
        assert result.total == 4
        assert [w.candidate_id for w in result.diagnostics.warnings] == ["j9"]
        assert result.diagnostics.skipped == 1

    @pytest.mark.asyncio
    async def test_failing_batch_recorded(self, as_of, monkeypatch):
        orch = RecommendationOrchestrator(_store(), settings=Settings(cache_enabled=False))

        def boom(seeker, batch):
            raise RuntimeError("scorer crashed")

        monkeypatch.setattr(orch, "_score_batch", boom)
        result = await orch.recommend("s1", as_of=as_of)

        assert result.status == "empty"
        assert result.diagnostics.skipped == 4
        assert all(w.reason == "scorer crashed" for w in result.diagnostics.warnings)

    @pytest.mark.asyncio
    async def test_timeout_returns_partial(self, as_of, monkeypatch):
        orch = RecommendationOrchestrator(_store(), settings=Settings(scoring_timeout_seconds=0.05))

        def slow(seeker, batch):
            time.sleep(0.5)
            return []

        monkeypatch.setattr(orch, "_score_batch", slow)
        result = await orch.recommend("s1", as_of=as_of)

        assert result.partial is True
        assert len(orch.cache) == 0


class TestCaching:
    @pytest.mark.asyncio
    async def test_second_call_hits_cache(self, as_of):
        orch = RecommendationOrchestrator(_store(), settings=Settings())
        first = await orch.recommend("s1", as_of=as_of)
        second = await orch.recommend("s1", page=2, page_size=2, as_of=as_of)

        assert first.diagnostics.cache_hit is False
        assert second.diagnostics.cache_hit is True
        assert second.total == first.total

    @pytest.mark.asyncio
    async def test_corpus_change_misses(self, as_of):
        store = _store()
        orch = RecommendationOrchestrator(store, settings=Settings())
        await orch.recommend("s1", as_of=as_of)
        store.put_job({"id": "j4", "skills": ["CSS"]})
        result = await orch.recommend("s1", page_size=10, as_of=as_of)

        assert result.diagnostics.cache_hit is False
        assert "j4" in _ids(result)


class TestLearningForJob:
    @pytest.mark.asyncio
    async def test_resources_for_job_gap(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        result = await orch.recommend_learning_for_job("s1", "j1", as_of=as_of)

        assert _ids(result) == ["r1"]
        assert [g.skill for g in result.gap_report] == ["node", "react"]

    @pytest.mark.asyncio
    async def test_no_gap_ranks_all_resources(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        result = await orch.recommend_learning_for_job("s1", "j2", limit=5, as_of=as_of)

        assert result.gap_report == []
        assert set(_ids(result)) == {"r1", "r2"}

    @pytest.mark.asyncio
    async def test_unknown_job(self, as_of, no_cache):
        orch = RecommendationOrchestrator(_store(), settings=no_cache)
        with pytest.raises(CandidateNotFound):
            await orch.recommend_learning_for_job("s1", "nope", as_of=as_of)


class TestPreview:
    @pytest.mark.asyncio
    async def test_inline_corpus(self, as_of, no_cache):
        orch = RecommendationOrchestrator(settings=no_cache)
        result = await orch.preview(PROFILE, JOBS, RESOURCES, page_size=10, as_of=as_of)

        assert result.seeker_id == "s1"
        assert _ids(result) == ["r1", "j2", "j1", "r2"]

    @pytest.mark.asyncio
    async def test_invalid_inline_profile(self, as_of, no_cache):
        orch = RecommendationOrchestrator(settings=no_cache)
        with pytest.raises(InvalidProfile):
            await orch.preview({"skills": ["python"]}, JOBS, [], as_of=as_of)


class TestScoreCandidate:
    def test_scenario_skills_and_gap(self, as_of):
        seeker = extract_seeker({"id": "s1", "skills": ["javascript", "html", "css"]}, as_of)
        job = extract_candidate({"id": "j1", "skills": ["react", "javascript", "node"]}, "job")

        result = score_candidate(seeker, job)
        assert result.skills_gap == ["node", "react"]
        assert "Add these skills to your profile: node, react" in result.areas_of_improvement

    def test_monotonic_in_seeker_skills(self, as_of):
        job = extract_candidate(
            {"id": "j1", "title": "Data developer", "description": "python analytics",
             "skills": ["python", "sql", "docker"]},
            "job",
        )
        base = {"id": "s1", "bio": "python analytics enthusiast", "skills": ["python"]}
        previous = score_candidate(extract_seeker(base, as_of), job).score
        for extra in (["sql"], ["sql", "docker"]):
            seeker = extract_seeker({**base, "skills": ["python"] + extra}, as_of)
            score = score_candidate(seeker, job).score
            assert score >= previous
            previous = score

    def test_skill_in_unrelated_category_never_lowers_score(self, as_of):
        skills = ["data analysis"] + [f"tool{i}" for i in range(19)]
        job = extract_candidate({"id": "j1", "skills": skills, "category": "finance"}, "job")

        for stated in ([], ["Marketing"]):
            prefs = {"industries": stated}
            before = score_candidate(
                extract_seeker({"id": "s1", "skills": [], "job_preferences": prefs}, as_of), job
            )
            after = score_candidate(
                extract_seeker({"id": "s1", "skills": ["data analysis"], "job_preferences": prefs}, as_of),
                job,
            )
            assert after.score > before.score

    def test_no_salary_preference_is_neutral(self, as_of):
        seeker = extract_seeker({"id": "s1"}, as_of)
        job = extract_candidate(
            {"id": "j1", "salary": {"min": 500000, "max": 1000000, "currency": "NGN"}}, "job"
        )
        salary = next(s for s in score_candidate(seeker, job).sub_scores if s.dimension == "salary")
        assert salary.value == 0.5
