"""Decision analytics routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schema.categories import DecisionCategory
from app.schemas.analytics import AnalyticsPeriod, AnalyticsSummary
from app.schemas.common import ApiResponse
from app.services.analytics import get_analytics_summary

router = APIRouter(prefix="/decisions/analytics")


@router.get("/summary", response_model=ApiResponse[AnalyticsSummary])
def get_summary(
    period: AnalyticsPeriod = Query(default="month"),
    category: DecisionCategory | None = Query(default=None),
    db: Session = Depends(get_db),
) -> ApiResponse[AnalyticsSummary]:
    """Aggregate decision patterns for dashboards."""

    return ApiResponse(
        data=get_analytics_summary(
            db,
            period=period,
            category=category.value if category is not None else None,
        )
    )
