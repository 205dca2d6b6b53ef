"""Category set evolution.

A category value may only leave ``DecisionCategory`` after every live record
using it has been rewritten to a current value. ``remap_retired_categories``
performs that rewrite; ``assert_no_retired_categories`` is the guard to run
before shipping the smaller set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import translate_store_errors
from app.models.base import utcnow
from app.models.decision import Decision
from app.schema.categories import FALLBACK_CATEGORY, RETIRED_CATEGORY_VALUES, is_decision_category
from app.services.indexing import reindex

logger = logging.getLogger(__name__)


class CategoryMigrationError(RuntimeError):
    """Raised when a category change would leave records on an invalid value."""


def count_by_category(db: Session, categories: Iterable[str]) -> dict[str, int]:
    """Return live record counts for each of ``categories`` (zeros included)."""

    wanted = list(dict.fromkeys(categories))
    counts = {category: 0 for category in wanted}
    if not wanted:
        return counts
    stmt = (
        select(Decision.category, func.count(Decision.id))
        .where(Decision.category.in_(wanted))
        .group_by(Decision.category)
    )
    with translate_store_errors():
        for category, count in db.execute(stmt).all():
            counts[str(category)] = int(count)
    return counts


def remap_retired_categories(
    db: Session,
    retired: Iterable[str] = RETIRED_CATEGORY_VALUES,
    *,
    fallback: str = FALLBACK_CATEGORY,
    dry_run: bool = False,
) -> dict[str, int]:
    """Rewrite records using a retired category to ``fallback`` in one transaction.

    Returns how many records each retired value had.
    """

    if not is_decision_category(fallback):
        raise CategoryMigrationError(f"Fallback category {fallback!r} is not a current category")
    retired_values = [value for value in dict.fromkeys(retired) if value != fallback]
    if not retired_values:
        return {}
    current_values = [value for value in retired_values if is_decision_category(value)]
    if current_values:
        raise CategoryMigrationError(
            f"Remove {', '.join(current_values)} from DecisionCategory before remapping"
        )

    counts = count_by_category(db, retired_values)
    for value, count in counts.items():
        logger.info("Found %d decisions with retired category %r", count, value)
    if dry_run or not any(counts.values()):
        return counts

    with translate_store_errors():
        rows = db.scalars(select(Decision).where(Decision.category.in_(retired_values))).all()
        now = utcnow()
        for decision in rows:
            decision.category = fallback
            decision.date_updated = now
            reindex(db, decision)
        db.commit()
    logger.info("Remapped %d decisions to category %r", sum(counts.values()), fallback)
    return counts


def assert_no_retired_categories(db: Session, retired: Iterable[str] = RETIRED_CATEGORY_VALUES) -> None:
    """Raise when any live record still references a retired category."""

    remaining = {value: count for value, count in count_by_category(db, retired).items() if count}
    if remaining:
        detail = ", ".join(f"{value}={count}" for value, count in sorted(remaining.items()))
        raise CategoryMigrationError(f"Records still use retired categories: {detail}")
