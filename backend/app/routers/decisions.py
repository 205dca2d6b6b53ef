"""Decision CRUD and search routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.decision import (
    DecisionCreate,
    DecisionRead,
    DecisionUpdate,
    DeleteResult,
    FlagForReviewRequest,
    OutcomeUpdateRequest,
    SimilarLinkRequest,
)
from app.schemas.search import DecisionSearchResponse
from app.services.decisions import (
    create_decision,
    delete_decision,
    flag_for_review,
    get_decision,
    mark_similar,
    set_outcome,
    update_decision,
)
from app.services.search import search_decisions

DecisionIdParam = Path(..., description="Decision UUID")

router = APIRouter(prefix="/decisions")


@router.get("", response_model=ApiResponse[DecisionSearchResponse])
def list_decisions(
    search: str | None = Query(default=None),
    category: str | None = Query(default=None),
    project: str | None = Query(default=None),
    tags: str | None = Query(default=None, description="Comma-separated; matches any"),
    confidence_min: str | None = Query(default=None),
    confidence_max: str | None = Query(default=None),
    outcome_status: str | None = Query(default=None),
    flagged: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    include_metadata: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionSearchResponse]:
    """Search and filter decisions with pagination and filter metadata."""

    # Raw strings on purpose: the validator reports every bad field at once.
    raw_filters = {
        "search": search,
        "category": category,
        "project": project,
        "tags": tags,
        "confidence_min": confidence_min,
        "confidence_max": confidence_max,
        "outcome_status": outcome_status,
        "flagged": flagged,
        "sort": sort,
        "limit": limit,
        "offset": offset,
        "include_metadata": include_metadata,
    }
    return ApiResponse(data=search_decisions(db, raw_filters))


@router.post("", response_model=ApiResponse[DecisionRead], status_code=201)
def post_decision(
    payload: DecisionCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Log a new decision."""

    return ApiResponse(data=DecisionRead.model_validate(create_decision(db, payload)))


@router.get("/{decision_id}", response_model=ApiResponse[DecisionRead])
def get_decision_by_id(
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Return one decision."""

    decision = get_decision(db, str(decision_id))
    if decision is None:
        raise HTTPException(status_code=404, detail="Decision not found")
    return ApiResponse(data=DecisionRead.model_validate(decision))


@router.api_route("/{decision_id}", methods=["PATCH", "PUT"], response_model=ApiResponse[DecisionRead])
def patch_decision(
    payload: DecisionUpdate,
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Partially update one decision."""

    updated = update_decision(db, str(decision_id), payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Decision not found")
    return ApiResponse(data=DecisionRead.model_validate(updated))


@router.delete("/{decision_id}", response_model=ApiResponse[DeleteResult])
def remove_decision(
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DeleteResult]:
    """Hard-delete one decision."""

    deleted = delete_decision(db, str(decision_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Decision not found")
    return ApiResponse(data=DeleteResult(id=str(decision_id), deleted=True))


@router.put("/{decision_id}/outcome", response_model=ApiResponse[DecisionRead])
def put_outcome(
    payload: OutcomeUpdateRequest,
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Record how a decision turned out."""

    updated = set_outcome(db, str(decision_id), payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Decision not found")
    return ApiResponse(data=DecisionRead.model_validate(updated))


@router.put("/{decision_id}/flag-for-review", response_model=ApiResponse[DecisionRead])
def put_flag_for_review(
    payload: FlagForReviewRequest,
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Flag or unflag a decision for review."""

    updated = flag_for_review(db, str(decision_id), payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Decision not found")
    return ApiResponse(data=DecisionRead.model_validate(updated))


@router.post("/{decision_id}/similar", response_model=ApiResponse[DecisionRead])
def post_similar(
    payload: SimilarLinkRequest,
    decision_id: UUID = DecisionIdParam,
    db: Session = Depends(get_db),
) -> ApiResponse[DecisionRead]:
    """Link two decisions as similar."""

    updated = mark_similar(db, str(decision_id), payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Decision or similar decision not found")
    return ApiResponse(data=DecisionRead.model_validate(updated))
