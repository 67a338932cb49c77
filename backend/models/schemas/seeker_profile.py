"""Raw seeker profile snapshot, as read from the profile store."""

from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator


class StoreRecord(BaseModel):
    """Base for documents read from the stores.

    Stored documents use ``null`` for "not set", so an explicit null on an
    optional field validates like a missing key.
    """

    @field_validator("*", mode="before")
    @classmethod
    def _null_means_unset(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value


class SkillEntry(StoreRecord):
    """A skill stored as an object rather than a bare string."""
    name: str
    level: str = ""  # beginner, intermediate, advanced, expert


class LocationDetail(StoreRecord):
    """A location stored as an object rather than a bare string."""
    city: str = ""
    country: str = ""
    address: str = ""

    def as_text(self) -> str:
        """City and country; the street address only when neither is set."""
        parts = [p.strip() for p in (self.city, self.country) if p.strip()]
        if not parts and self.address.strip():
            parts.append(self.address.strip())
        return ", ".join(parts)


def location_text(location: "str | LocationDetail") -> str:
    if isinstance(location, LocationDetail):
        return location.as_text()
    return location


class WorkExperience(StoreRecord):
    """A single work history entry."""
    company: str = ""
    position: str = Field("", validation_alias=AliasChoices("position", "title"))
    start_date: date | None = None
    end_date: date | None = None
    current: bool = False
    description: str = ""
    skills_used: list[str] = []

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        # Stored dates arrive as ISO timestamps; only the calendar date matters
        if value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value


class Education(StoreRecord):
    """A single education entry."""
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""


class SalaryRange(StoreRecord):
    min: int | None = None
    max: int | None = None
    currency: str = ""


class JobPreferences(StoreRecord):
    job_types: list[str] = []
    locations: list[str] = Field(
        [], validation_alias=AliasChoices("locations", "work_locations")
    )
    salary_range: SalaryRange | None = Field(
        None, validation_alias=AliasChoices("salary_range", "salary_expectation")
    )
    remote_preference: str = ""  # remote, hybrid, onsite, flexible
    industries: list[str] = []


class SeekerProfile(StoreRecord):
    """Seeker profile record owned by the external profile store.

    Skills may be plain strings or ``{name, level}`` objects, and the
    location a string or a ``{city, country, address}`` object; both shapes
    exist in stored data.
    """
    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"))
    skills: list[str | SkillEntry] = []
    bio: str = ""
    location: str | LocationDetail = ""
    education: list[Education] = []
    work_experience: list[WorkExperience] = []
    job_preferences: JobPreferences = JobPreferences()
    experience_level: str | None = None  # explicit override of the inferred level
    applied_categories: list[str] = []  # job categories of past applications
