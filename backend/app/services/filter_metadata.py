"""Filter metadata for populating search controls.

Computed over the whole store, not the current filtered set, so the
available choices stay stable while filters are applied.
"""

from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from app.errors import translate_store_errors
from app.models.decision import Decision
from app.schemas.search import ConfidenceRange, OutcomeStats, SearchMetadata
from app.services.indexing import is_postgres


def get_search_metadata(db: Session) -> SearchMetadata:
    """Return distinct categories/projects/tags, confidence bounds and outcome counts."""

    with translate_store_errors():
        return SearchMetadata(
            available_categories=list_distinct_categories(db),
            available_projects=list_distinct_projects(db),
            available_tags=list_distinct_tags(db),
            confidence_range=get_confidence_range(db),
            outcome_stats=get_outcome_stats(db),
        )


def list_distinct_categories(db: Session) -> list[str]:
    stmt = select(Decision.category).distinct().order_by(Decision.category.asc())
    return [str(category) for category in db.scalars(stmt).all()]


def list_distinct_projects(db: Session) -> list[str]:
    stmt = (
        select(Decision.project_name)
        .where(Decision.project_name.is_not(None), Decision.project_name != "")
        .distinct()
        .order_by(Decision.project_name.asc())
    )
    return [str(project) for project in db.scalars(stmt).all()]


def list_distinct_tags(db: Session) -> list[str]:
    if is_postgres(db):
        tag = func.unnest(Decision.tags).label("tag")
        subquery = select(tag).subquery()
        stmt = select(subquery.c.tag).distinct().order_by(subquery.c.tag.asc())
        return [str(value) for value in db.scalars(stmt).all()]

    tags: set[str] = set()
    for values in db.scalars(select(Decision.tags)).all():
        tags.update(value for value in values or [] if value)
    return sorted(tags)


def get_confidence_range(db: Session) -> ConfidenceRange | None:
    row = db.execute(
        select(func.min(Decision.confidence_level), func.max(Decision.confidence_level))
    ).one()
    minimum, maximum = row
    if minimum is None or maximum is None:
        return None
    return ConfidenceRange(min=int(minimum), max=int(maximum))


def get_outcome_stats(db: Session) -> OutcomeStats:
    row = db.execute(
        select(
            func.count(Decision.id),
            func.sum(case((Decision.outcome_success.is_(None), 1), else_=0)),
            func.sum(case((Decision.outcome_success.is_(True), 1), else_=0)),
            func.sum(case((Decision.outcome_success.is_(False), 1), else_=0)),
        )
    ).one()
    total, pending, success, failed = (int(value or 0) for value in row)
    return OutcomeStats(total=total, pending=pending, success=success, failed=failed)
