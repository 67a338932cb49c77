"""Read-side seam to the external profile and job/resource stores.

The engine only reads snapshots through this interface. Eligibility
(``is_active``) is decided by the store, not by the engine.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class RecommendationStore(ABC):
    """Source of seeker profiles and the active candidate corpus.

    Versions identify snapshots for caching; a store that cannot version
    its data returns ``None`` and results are then never cached.
    """

    @abstractmethod
    def get_profile(self, seeker_id: str) -> Record | None:
        """Raw seeker profile, or None if the seeker does not exist."""

    @abstractmethod
    def list_active_jobs(self) -> list[Record]:
        """Raw records of all active job postings."""

    @abstractmethod
    def list_active_resources(self) -> list[Record]:
        """Raw records of all active learning resources."""

    @abstractmethod
    def get_job(self, job_id: str) -> Record | None:
        """Raw job record, active or not."""

    def profile_version(self, seeker_id: str) -> str | None:
        return None

    def corpus_version(self) -> str | None:
        return None


def _record_id(record: Record) -> str:
    record_id = record.get("id") or record.get("_id")
    if not record_id:
        raise ValueError("record has no id")
    return str(record_id)


class InMemoryStore(RecommendationStore):
    """Dict-backed store. Every write bumps the matching version."""

    def __init__(self) -> None:
        self._profiles: dict[str, Record] = {}
        self._profile_revisions: dict[str, int] = {}
        self._jobs: dict[str, Record] = {}
        self._resources: dict[str, Record] = {}
        self._corpus_revision = 0

    # --- writes ---

    def put_profile(self, profile: Record) -> None:
        seeker_id = _record_id(profile)
        self._profiles[seeker_id] = profile
        self._profile_revisions[seeker_id] = self._profile_revisions.get(seeker_id, 0) + 1

    def put_job(self, job: Record) -> None:
        self._jobs[_record_id(job)] = job
        self._corpus_revision += 1

    def put_resource(self, resource: Record) -> None:
        self._resources[_record_id(resource)] = resource
        self._corpus_revision += 1

    def remove_job(self, job_id: str) -> None:
        if self._jobs.pop(job_id, None) is not None:
            self._corpus_revision += 1

    # --- reads ---

    def get_profile(self, seeker_id: str) -> Record | None:
        return self._profiles.get(seeker_id)

    def list_active_jobs(self) -> list[Record]:
        return [j for j in self._jobs.values() if j.get("is_active", True)]

    def list_active_resources(self) -> list[Record]:
        return [r for r in self._resources.values() if r.get("is_active", True)]

    def get_job(self, job_id: str) -> Record | None:
        return self._jobs.get(job_id)

    def profile_version(self, seeker_id: str) -> str | None:
        revision = self._profile_revisions.get(seeker_id)
        return None if revision is None else str(revision)

    def corpus_version(self) -> str | None:
        return str(self._corpus_revision)
