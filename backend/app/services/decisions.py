"""Write-side services for decisions.

Each mutation reindexes the row and commits in one step, so a committed row
never carries a stale search vector.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import SelfReferenceError, translate_store_errors
from app.models.base import utcnow
from app.models.decision import Decision
from app.schemas.decision import (
    DecisionCreate,
    DecisionUpdate,
    FlagForReviewRequest,
    OutcomeUpdateRequest,
    SimilarLinkRequest,
    SimilarityNote,
)
from app.services.filter_metadata import list_distinct_projects
from app.services.indexing import reindex

logger = logging.getLogger(__name__)


def create_decision(db: Session, payload: DecisionCreate) -> Decision:
    """Persist a new decision with its search vector."""

    with translate_store_errors():
        decision = Decision(**payload.model_dump())
        reindex(db, decision)
        db.add(decision)
        db.commit()
        db.refresh(decision)
    logger.info("Created decision %s", decision.id)
    return decision


def get_decision(db: Session, decision_id: str) -> Decision | None:
    """Return one decision or ``None``."""

    with translate_store_errors():
        return db.scalar(select(Decision).where(Decision.id == decision_id))


def update_decision(db: Session, decision_id: str, payload: DecisionUpdate) -> Decision | None:
    """Apply a partial update; any change triggers a reindex."""

    with translate_store_errors():
        decision = db.scalar(select(Decision).where(Decision.id == decision_id))
        if decision is None:
            return None
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(decision, field, value)
        _touch_and_commit(db, decision)
    return decision


def delete_decision(db: Session, decision_id: str) -> bool:
    """Hard-delete one decision."""

    with translate_store_errors():
        decision = db.scalar(select(Decision).where(Decision.id == decision_id))
        if decision is None:
            return False
        db.delete(decision)
        db.commit()
    logger.info("Deleted decision %s", decision_id)
    return True


def set_outcome(db: Session, decision_id: str, payload: OutcomeUpdateRequest) -> Decision | None:
    """Record the observed outcome of a decision."""

    with translate_store_errors():
        decision = db.scalar(select(Decision).where(Decision.id == decision_id))
        if decision is None:
            return None
        decision.outcome = payload.outcome.strip()
        decision.outcome_success = payload.outcome_success
        decision.outcome_date = payload.outcome_date or datetime.now(timezone.utc)
        if payload.lessons_learned is not None:
            decision.lessons_learned = payload.lessons_learned.strip()
        _touch_and_commit(db, decision)
    return decision


def flag_for_review(db: Session, decision_id: str, payload: FlagForReviewRequest) -> Decision | None:
    """Flag or unflag a decision for review."""

    with translate_store_errors():
        decision = db.scalar(select(Decision).where(Decision.id == decision_id))
        if decision is None:
            return None
        decision.flagged_for_review = payload.flagged_for_review
        if payload.revisit_reason is not None:
            decision.revisit_reason = payload.revisit_reason.strip()
        if payload.next_review_date is not None:
            decision.next_review_date = payload.next_review_date
        _touch_and_commit(db, decision)
    return decision


def mark_similar(db: Session, decision_id: str, payload: SimilarLinkRequest) -> Decision | None:
    """Link two decisions as similar in both directions.

    Returns ``None`` when either decision does not exist.
    """

    other_id = payload.similar_to_id.strip()
    if other_id == decision_id:
        raise SelfReferenceError("Cannot mark a decision as similar to itself")

    with translate_store_errors():
        rows = db.scalars(select(Decision).where(Decision.id.in_([decision_id, other_id]))).all()
        by_id = {row.id: row for row in rows}
        decision = by_id.get(decision_id)
        other = by_id.get(other_id)
        if decision is None or other is None:
            return None

        decision.similar_decision_ids = _append_unique(decision.similar_decision_ids, other.id)
        other.similar_decision_ids = _append_unique(other.similar_decision_ids, decision.id)
        note = SimilarityNote(
            related_decision_id=other.id,
            reason=payload.reason.strip(),
            comparison=payload.comparison.strip(),
        )
        decision.similarity_notes = [
            *[
                existing
                for existing in decision.similarity_notes or []
                if existing.get("related_decision_id") != other.id
            ],
            note.model_dump(),
        ]
        now = utcnow()
        for row in (decision, other):
            row.date_updated = now
            reindex(db, row)
        db.commit()
        db.refresh(decision)
    return decision


def list_projects(db: Session) -> list[str]:
    """Distinct project names for autocomplete."""

    with translate_store_errors():
        return list_distinct_projects(db)


def _touch_and_commit(db: Session, decision: Decision) -> None:
    decision.date_updated = utcnow()
    reindex(db, decision)
    db.commit()
    db.refresh(decision)


def _append_unique(values: list[str] | None, value: str) -> list[str]:
    current = list(values or [])
    if value not in current:
        current.append(value)
    return current
