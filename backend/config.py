import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"
    rate_limit: str = "30/minute"

    # Pagination
    default_page_size: int = 6  # dashboard widgets show 6 cards
    max_page_size: int = 50
    min_score: float = 0.0  # drop results scoring below this (0.0 keeps everything)

    # Scoring fan-out
    scoring_workers: int = 0  # 0 -> os.cpu_count()
    scoring_batch_size: int = 32
    scoring_timeout_seconds: float = 5.0
    selection_strategy: str = "sort"  # "sort" | "heap"

    # Explanations and gap analysis
    gap_relevance_threshold: float = 0.3
    gap_coverage_weight: float = 0.25
    explanation_min_value: float = 0.3
    max_reasons: int = 5
    recency_window_days: int = 30  # assumed application window when a job has no deadline

    # Result cache
    cache_enabled: bool = True
    cache_max_entries: int = 256

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def worker_count(self) -> int:
        return self.scoring_workers or os.cpu_count() or 1


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
