from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class PreviewRequest(BaseModel):
    profile: dict[str, Any] = Field(..., description="Seeker profile document")
    jobs: list[dict[str, Any]] = Field(default=[], max_length=2000)
    resources: list[dict[str, Any]] = Field(default=[], max_length=2000)
    kind: Literal["job", "resource"] | None = None
    page: int = Field(default=1, ge=1)
    page_size: int | None = Field(default=None, ge=1)
    as_of: datetime | None = Field(default=None, description="Reference time for recency scoring")
