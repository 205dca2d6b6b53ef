"""Decision search request/response schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.schema.categories import DecisionCategory
from app.schemas.decision import DecisionRead

OutcomeStatus = Literal["all", "pending", "success", "failed"]
SortOption = Literal["date-desc", "date-asc", "confidence-desc", "confidence-asc", "relevance"]

SORT_OPTIONS: tuple[str, ...] = ("date-desc", "date-asc", "confidence-desc", "confidence-asc", "relevance")
SORT_ALIASES: dict[str, str] = {"newest": "date-desc", "oldest": "date-asc"}
OUTCOME_STATUSES: tuple[str, ...] = ("all", "pending", "success", "failed")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 500
MAX_TAG_COUNT = 20


class SearchFilters(BaseModel):
    """Validated and sanitized search request.

    Built only by ``validate_search_filters``; every field is already in its
    final form (trimmed, deduped, clamped).
    """

    search: str | None = None
    category: DecisionCategory | None = None
    project: str | None = None
    tags: list[str] | None = None
    confidence_min: int | None = None
    confidence_max: int | None = None
    outcome_status: OutcomeStatus = "all"
    flagged: bool | None = None
    sort: SortOption = "date-desc"
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    include_metadata: bool = True


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConfidenceRange(BaseModel):
    """Observed confidence bounds."""

    min: int
    max: int


class OutcomeStats(BaseModel):
    """Outcome tri-state breakdown."""

    total: int
    pending: int
    success: int
    failed: int


class SearchMetadata(_CamelModel):
    """Distinct filter values for populating filter controls."""

    available_categories: list[str]
    available_projects: list[str]
    available_tags: list[str]
    confidence_range: ConfidenceRange | None = None
    outcome_stats: OutcomeStats | None = None


class DecisionSearchResponse(_CamelModel):
    """One page of matching decisions plus filter metadata."""

    results: list[DecisionRead]
    total: int
    has_more: bool
    limit: int
    offset: int
    metadata: SearchMetadata | None = None
