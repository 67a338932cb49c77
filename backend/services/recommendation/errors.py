"""Error taxonomy for the recommendation engine.

Fatal errors abort the request and reach the caller with no partial data.
Per-candidate errors are absorbed by the orchestrator and surface only as
diagnostics warnings. An empty corpus and a scoring timeout are not errors:
they show up as ``status="empty"`` and ``partial=True`` respectively.
"""


class RecommendationError(Exception):
    """Base class for engine errors."""


class SeekerNotFound(RecommendationError):
    def __init__(self, seeker_id: str) -> None:
        super().__init__(f"Seeker not found: {seeker_id}")
        self.seeker_id = seeker_id


class InvalidProfile(RecommendationError):
    """The seeker profile could not be turned into a feature set."""

    def __init__(self, seeker_id: str, reason: str) -> None:
        super().__init__(f"Invalid profile {seeker_id}: {reason}")
        self.seeker_id = seeker_id
        self.reason = reason


class CandidateExtractionFailed(RecommendationError):
    """A single job or resource record is malformed. The candidate is skipped."""

    def __init__(self, candidate_id: str, kind: str, reason: str) -> None:
        super().__init__(f"Could not extract {kind} {candidate_id}: {reason}")
        self.candidate_id = candidate_id
        self.kind = kind
        self.reason = reason


class CandidateNotFound(RecommendationError):
    def __init__(self, candidate_id: str, kind: str) -> None:
        super().__init__(f"{kind.capitalize()} not found: {candidate_id}")
        self.candidate_id = candidate_id
        self.kind = kind
