"""Decision request/response schemas."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schema.categories import DecisionCategory, DecisionType, OptimizedFor

_STRING_LIST_FIELDS = (
    "tags",
    "stakeholders",
    "tradeoffs_accepted",
    "tradeoffs_rejected",
    "assumptions",
    "invalidation_conditions",
)
_TRIMMED_TEXT_FIELDS = (
    "title",
    "project_name",
    "notes",
    "business_context",
    "problem_statement",
    "chosen_option",
    "reasoning",
    "revisit_reason",
)
_NON_NULLABLE_UPDATE_FIELDS = (
    "title",
    "category",
    "business_context",
    "problem_statement",
    "flagged_for_review",
    *_STRING_LIST_FIELDS,
    "optimized_for",
    "options_considered",
)


def clean_string_list(values: Iterable[str] | None) -> list[str]:
    """Trim, drop blanks, and dedupe while keeping first-seen order."""

    ordered: list[str] = []
    seen: set[str] = set()
    for value in values or []:
        clean = value.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        ordered.append(clean)
    return ordered


class DecisionOption(BaseModel):
    """One option weighed while deciding."""

    name: str = Field(min_length=1)
    description: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class SimilarityNote(BaseModel):
    """Why two decisions were linked."""

    related_decision_id: str
    reason: str
    comparison: str = ""


class _DecisionFields(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True, validate_default=True)

    @field_validator(*_STRING_LIST_FIELDS, mode="after", check_fields=False)
    @classmethod
    def _clean_lists(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return clean_string_list(value)

    @field_validator(*_TRIMMED_TEXT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _trim_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class DecisionCreate(_DecisionFields):
    """Payload for logging a new decision."""

    title: str = Field(min_length=1, max_length=200)
    project_name: str | None = None
    category: DecisionCategory = DecisionCategory.OTHER
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None

    business_context: str = Field(min_length=1)
    problem_statement: str = Field(min_length=1)
    stakeholders: list[str] = Field(default_factory=list)
    decision_type: DecisionType | None = DecisionType.REVERSIBLE

    options_considered: list[DecisionOption] = Field(default_factory=list)
    chosen_option: str | None = None
    reasoning: str | None = Field(default=None, min_length=10)
    confidence_level: int | None = Field(default=None, ge=1, le=10)

    tradeoffs_accepted: list[str] = Field(default_factory=list)
    tradeoffs_rejected: list[str] = Field(default_factory=list)
    optimized_for: list[OptimizedFor] = Field(default_factory=list)

    assumptions: list[str] = Field(default_factory=list)
    invalidation_conditions: list[str] = Field(default_factory=list)
    next_review_date: date | None = None
    revisit_reason: str | None = None
    flagged_for_review: bool = False


class DecisionUpdate(_DecisionFields):
    """Partial update; only provided fields are written.

    ``id``, ``date_created`` and ``search_vector`` are rejected as unknown
    fields.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    project_name: str | None = None
    category: DecisionCategory | None = None
    tags: list[str] | None = None
    notes: str | None = None

    business_context: str | None = Field(default=None, min_length=1)
    problem_statement: str | None = Field(default=None, min_length=1)
    stakeholders: list[str] | None = None
    decision_type: DecisionType | None = None

    options_considered: list[DecisionOption] | None = None
    chosen_option: str | None = None
    reasoning: str | None = Field(default=None, min_length=10)
    confidence_level: int | None = Field(default=None, ge=1, le=10)

    tradeoffs_accepted: list[str] | None = None
    tradeoffs_rejected: list[str] | None = None
    optimized_for: list[OptimizedFor] | None = None

    assumptions: list[str] | None = None
    invalidation_conditions: list[str] | None = None
    next_review_date: date | None = None
    revisit_reason: str | None = None
    flagged_for_review: bool | None = None

    outcome: str | None = None
    outcome_date: datetime | None = None
    outcome_success: bool | None = None
    lessons_learned: str | None = None

    @model_validator(mode="after")
    def validate_update(self) -> "DecisionUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        nulled = [
            name
            for name in _NON_NULLABLE_UPDATE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class OutcomeUpdateRequest(BaseModel):
    """Record how a decision played out."""

    outcome: str = Field(min_length=1)
    outcome_success: bool
    outcome_date: datetime | None = None
    lessons_learned: str | None = None


class FlagForReviewRequest(BaseModel):
    """Flag or unflag a decision for review."""

    flagged_for_review: bool
    revisit_reason: str | None = None
    next_review_date: date | None = None


class SimilarLinkRequest(BaseModel):
    """Mark another decision as similar."""

    similar_to_id: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    comparison: str = ""


class DecisionRead(BaseModel):
    """Serialized decision."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    date_created: datetime
    date_updated: datetime

    title: str
    project_name: str | None
    category: str
    tags: list[str]
    notes: str | None

    business_context: str
    problem_statement: str
    stakeholders: list[str]
    decision_type: str | None

    options_considered: list[DecisionOption]
    chosen_option: str | None
    reasoning: str | None
    confidence_level: int | None

    tradeoffs_accepted: list[str]
    tradeoffs_rejected: list[str]
    optimized_for: list[str]

    assumptions: list[str]
    invalidation_conditions: list[str]
    next_review_date: date | None
    revisit_reason: str | None
    flagged_for_review: bool

    outcome: str | None
    outcome_date: datetime | None
    outcome_success: bool | None
    lessons_learned: str | None

    similar_decision_ids: list[str]
    related_decision_ids: list[str]
    similarity_notes: list[SimilarityNote]


class DeleteResult(BaseModel):
    """Delete response payload."""

    id: str
    deleted: bool
