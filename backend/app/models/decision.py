"""Decision ORM model."""

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UuidIdMixin
from app.models.column_types import SEARCH_VECTOR_COLUMN_TYPE, TEXT_ARRAY_COLUMN_TYPE
from app.schema.categories import DECISION_CATEGORY_VALUES


def category_check_sql(values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"category IN ({quoted})"


class Decision(Base, UuidIdMixin, TimestampMixin):
    """Single logged decision."""

    __tablename__ = "decisions"
    __table_args__ = (
        CheckConstraint(
            "confidence_level IS NULL OR (confidence_level >= 1 AND confidence_level <= 10)",
            name="ck_decisions_confidence_level_range",
        ),
        CheckConstraint(category_check_sql(DECISION_CATEGORY_VALUES), name="ck_decisions_category_valid"),
        Index("ix_decisions_date_created_category", "date_created", "category"),
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    project_name: Mapped[str | None] = mapped_column(Text, index=True, nullable=True)
    category: Mapped[str] = mapped_column(String(64), index=True, default="other", nullable=False)
    tags: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    business_context: Mapped[str] = mapped_column(Text, nullable=False)
    problem_statement: Mapped[str] = mapped_column(Text, nullable=False)
    stakeholders: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    decision_type: Mapped[str | None] = mapped_column(String(32), default="reversible", nullable=True)

    options_considered: Mapped[list[dict[str, object]]] = mapped_column(JSON, default=list, nullable=False)
    chosen_option: Mapped[str | None] = mapped_column(Text, nullable=True)
    reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence_level: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)

    tradeoffs_accepted: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    tradeoffs_rejected: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    optimized_for: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)

    assumptions: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    invalidation_conditions: Mapped[list[str]] = mapped_column(
        TEXT_ARRAY_COLUMN_TYPE,
        default=list,
        nullable=False,
    )
    next_review_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    revisit_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    flagged_for_review: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    outcome: Mapped[str | None] = mapped_column(Text, nullable=True)
    outcome_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    outcome_success: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    lessons_learned: Mapped[str | None] = mapped_column(Text, nullable=True)

    similar_decision_ids: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    related_decision_ids: Mapped[list[str]] = mapped_column(TEXT_ARRAY_COLUMN_TYPE, default=list, nullable=False)
    similarity_notes: Mapped[list[dict[str, str]]] = mapped_column(JSON, default=list, nullable=False)

    # Written only by app.services.indexing.reindex.
    search_vector: Mapped[object | None] = mapped_column(SEARCH_VECTOR_COLUMN_TYPE, nullable=True)
