"""Raw candidate records: job postings and learning resources."""

from datetime import datetime

from pydantic import AliasChoices, Field

from models.schemas.seeker_profile import LocationDetail, SalaryRange, SkillEntry, StoreRecord


class JobPosting(StoreRecord):
    """An active job posting from the job store.

    ``skills`` is the legacy single list; newer postings split it into
    ``required_skills`` and ``preferred_skills``. Legacy skills count as
    required.
    """
    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    description: str = ""
    skills: list[str | SkillEntry] = []
    required_skills: list[str | SkillEntry] = []
    preferred_skills: list[str | SkillEntry] = []
    experience_level: str | None = None  # entry, mid, senior, lead
    location: str | LocationDetail = ""
    work_mode: str = Field("", validation_alias=AliasChoices("work_mode", "type"))
    salary: SalaryRange | None = None
    job_category: str = Field("", validation_alias=AliasChoices("job_category", "category"))
    posted_at: datetime | None = Field(
        None, validation_alias=AliasChoices("posted_at", "created_at")
    )
    application_deadline: datetime | None = None
    is_active: bool = True


class LearningResource(StoreRecord):
    """An active learning resource (course, tutorial, video, article)."""
    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    description: str = ""
    type: str = ""
    skills: list[str | SkillEntry] = []
    difficulty: str | None = None  # beginner, intermediate, advanced
    category: str = ""
    duration: int | None = None  # minutes
    is_active: bool = True
