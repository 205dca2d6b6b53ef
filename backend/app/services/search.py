"""Decision search: filter composition, ranking, pagination and result shaping."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session

from app.errors import translate_store_errors
from app.models.decision import Decision
from app.schemas.decision import DecisionRead
from app.schemas.search import DecisionSearchResponse, SearchFilters
from app.services.filter_metadata import get_search_metadata
from app.services.filter_validation import validate_search_filters
from app.services.indexing import is_postgres
from app.services.text_search import TextSearch, get_text_search


def search_decisions(
    db: Session,
    raw_filters: Mapping[str, object],
    *,
    text_search: TextSearch | None = None,
) -> DecisionSearchResponse:
    """Validate raw parameters, then run one bounded search.

    Raises ``SearchValidationError`` before touching the store when any
    parameter is invalid, and ``StoreUnavailableError`` when the store cannot
    be reached.
    """

    filters = validate_search_filters(raw_filters)
    return run_search(db, filters, text_search=text_search)


def run_search(
    db: Session,
    filters: SearchFilters,
    *,
    text_search: TextSearch | None = None,
) -> DecisionSearchResponse:
    """Execute already-validated filters and shape the page."""

    with translate_store_errors():
        conditions = build_filter_conditions(db, filters)
        rank: ColumnElement[float] | None = None
        if filters.search:
            search_impl = text_search or get_text_search(db)
            plan = search_impl.plan(db, filters.search, conditions)
            conditions.append(plan.condition)
            rank = plan.rank

        total_stmt = select(func.count()).select_from(select(Decision.id).where(*conditions).subquery())
        total = int(db.scalar(total_stmt) or 0)

        stmt = (
            select(Decision)
            .where(*conditions)
            .order_by(*_order_by(filters.sort, rank))
            .limit(filters.limit)
            .offset(filters.offset)
        )
        rows = list(db.scalars(stmt).all())
        metadata = get_search_metadata(db) if filters.include_metadata else None

    results = [DecisionRead.model_validate(row) for row in rows]
    return DecisionSearchResponse(
        results=results,
        total=total,
        has_more=filters.offset + len(results) < total,
        limit=filters.limit,
        offset=filters.offset,
        metadata=metadata,
    )


def build_filter_conditions(db: Session, filters: SearchFilters) -> list[ColumnElement[bool]]:
    """AND-able predicates for every non-text filter."""

    conditions: list[ColumnElement[bool]] = []
    if filters.category is not None:
        conditions.append(Decision.category == filters.category.value)
    if filters.project:
        conditions.append(Decision.project_name == filters.project)
    if filters.tags:
        conditions.append(_tags_overlap(db, filters.tags))
    if filters.confidence_min is not None:
        conditions.append(Decision.confidence_level >= filters.confidence_min)
    if filters.confidence_max is not None:
        conditions.append(Decision.confidence_level <= filters.confidence_max)
    if filters.outcome_status == "pending":
        conditions.append(Decision.outcome_success.is_(None))
    elif filters.outcome_status == "success":
        conditions.append(Decision.outcome_success.is_(True))
    elif filters.outcome_status == "failed":
        conditions.append(Decision.outcome_success.is_(False))
    if filters.flagged is not None:
        conditions.append(Decision.flagged_for_review.is_(filters.flagged))
    return conditions


def _tags_overlap(db: Session, tags: list[str]) -> ColumnElement[bool]:
    # Any-of: a record matches when it shares at least one tag with the filter.
    if is_postgres(db):
        return Decision.tags.overlap(tags)
    tag_values = func.json_each(Decision.tags).table_valued("value").alias("tag_values")
    return select(tag_values.c.value).where(tag_values.c.value.in_(tags)).exists()


def _order_by(sort: str, rank: ColumnElement[float] | None) -> list[ColumnElement[object]]:
    # Decision.id is always the final key so equal primary keys page deterministically.
    if sort == "relevance" and rank is not None:
        return [rank.desc(), Decision.date_created.desc(), Decision.id.asc()]
    if sort == "date-asc":
        return [Decision.date_created.asc(), Decision.id.asc()]
    if sort == "confidence-desc":
        return [Decision.confidence_level.desc().nulls_last(), Decision.id.asc()]
    if sort == "confidence-asc":
        return [Decision.confidence_level.asc().nulls_last(), Decision.id.asc()]
    return [Decision.date_created.desc(), Decision.id.asc()]
