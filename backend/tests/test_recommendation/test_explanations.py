"""Tests for reason and improvement-tip generation."""

from models.schemas.match_result import SubScore
from services.recommendation.explanations import explain, improvement_tips


def _skills(value=0.6667, matched=("javascript", "react"), required=3):
    return SubScore(
        dimension="skills", value=value, weight=0.45,
        details={"matched": list(matched), "required": required},
    )


class TestExplain:
    def test_skills_reason(self, make_job):
        reasons = explain([_skills()], make_job())
        assert reasons == ["You have 2 of 3 required skills: javascript, react"]

    def test_skips_neutral_and_weak(self, make_job):
        subs = [
            _skills(),
            SubScore(dimension="location", value=0.5, weight=0.15, neutral=True),
            SubScore(dimension="experience", value=0.2, weight=0.15,
                     details={"seeker_level": "entry", "candidate_level": "lead", "distance": 3}),
        ]
        assert len(explain(subs, make_job())) == 1

    def test_cut_off_applies_to_value_not_contribution(self, make_job):
        category = SubScore(dimension="category", value=1.0, weight=0.05,
                            details={"category": "technical", "interest": "technical"})
        reasons = explain([_skills(), category], make_job())
        assert reasons[1] == "Matches your interest in technical"

    def test_min_value_override(self, make_job):
        category = SubScore(dimension="category", value=0.4, weight=0.05,
                            details={"category": "finance", "interest": "fintech"})
        assert len(explain([_skills(), category], make_job())) == 2
        assert len(explain([_skills(), category], make_job(), min_value=0.5)) == 1

    def test_ordered_by_contribution(self, make_job):
        subs = [
            SubScore(dimension="location", value=1.0, weight=0.15,
                     details={"city": "lagos", "mode": None}),
            _skills(value=1.0, matched=("javascript",), required=1),
        ]
        reasons = explain(subs, make_job())
        assert reasons[0].startswith("You have 1 of 1")
        assert reasons[1] == "Matches your preferred location: Lagos"

    def test_capped(self, make_job):
        subs = [
            _skills(),
            SubScore(dimension="location", value=1.0, weight=0.15, details={"remote": True}),
            SubScore(dimension="recency", value=1.0, weight=0.1, details={"days_since_posted": 0}),
        ]
        assert len(explain(subs, make_job(), max_reasons=2)) == 2

    def test_falls_back_to_top_contributor(self, make_job):
        subs = [
            _skills(value=0.1, matched=(), required=10),
            SubScore(dimension="recency", value=0.2, weight=0.1, details={"expired": True}),
        ]
        assert explain(subs, make_job()) == ["You have 0 of 10 required skills"]

    def test_zero_score_has_no_reasons(self, make_job):
        subs = [SubScore(dimension="skills", value=0.0, weight=0.45, details={"matched": [], "required": 2})]
        assert explain(subs, make_job()) == []

    def test_gap_coverage_reason(self, make_resource):
        sub = SubScore(
            dimension="gap_coverage", value=1.0, weight=0.25,
            details={"covered": ["react"], "top_skill": "react", "frequency": 3},
        )
        assert explain([sub], make_resource()) == [
            "Covers react, a skill missing for 3 jobs that match you"
        ]


class TestImprovementTips:
    def test_job_tips(self, make_seeker, make_job):
        seeker = make_seeker(skills={"a", "b", "c"}, experience_months=12)
        job = make_job(required_skills={"node", "react"}, experience_level="senior")

        tips = improvement_tips(seeker, job, ["node", "react"])
        assert tips[0] == "Add these skills to your profile: node, react"
        assert tips[1] == "Gain more experience for senior-level roles (currently 1.0 years)"
        assert "Add work experience to your profile" in tips
        assert len(tips) == 4

    def test_overqualified_hint(self, make_seeker, make_job):
        seeker = make_seeker(experience_level="senior", bio_length=200,
                             skills={"a", "b", "c"}, has_work_history=True)
        tips = improvement_tips(seeker, make_job(experience_level="entry"), [])
        assert tips == ["Consider highlighting your willingness to take entry-level roles"]

    def test_limit(self, make_seeker, make_job):
        job = make_job(experience_level="lead", preferred_skills={"docker"})
        assert len(improvement_tips(make_seeker(), job, ["go"], limit=2)) == 2

    def test_resources_have_no_tips(self, make_seeker, make_resource):
        assert improvement_tips(make_seeker(), make_resource(), ["react"]) == []
