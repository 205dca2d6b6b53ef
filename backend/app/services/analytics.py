"""Decision analytics aggregation."""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import translate_store_errors
from app.models.decision import Decision
from app.schemas.analytics import AnalyticsPeriod, AnalyticsSummary

PERIOD_DAYS: dict[str, int | None] = {"week": 7, "month": 30, "quarter": 90, "all": None}


def get_analytics_summary(
    db: Session,
    *,
    period: AnalyticsPeriod = "month",
    category: str | None = None,
    now: datetime | None = None,
) -> AnalyticsSummary:
    """Aggregate decisions created within ``period`` (optionally one category)."""

    current = now or datetime.now(timezone.utc)
    conditions = []
    days = PERIOD_DAYS[period]
    if days is not None:
        conditions.append(Decision.date_created >= current - timedelta(days=days))
    if category:
        conditions.append(Decision.category == category)

    stmt = select(
        Decision.category,
        Decision.confidence_level,
        Decision.outcome_success,
        Decision.flagged_for_review,
        Decision.next_review_date,
        Decision.optimized_for,
        Decision.tradeoffs_accepted,
        Decision.tradeoffs_rejected,
    ).where(*conditions)
    with translate_store_errors():
        rows = db.execute(stmt).all()

    by_category: Counter[str] = Counter()
    outcomes_by_category: dict[str, list[bool]] = defaultdict(list)
    optimized_for: Counter[str] = Counter()
    accepted: Counter[str] = Counter()
    rejected: Counter[str] = Counter()
    confidences: list[int] = []
    flagged = 0
    past_review = 0
    today: date = current.date()

    for row in rows:
        by_category[row.category] += 1
        if row.outcome_success is not None:
            outcomes_by_category[row.category].append(bool(row.outcome_success))
        if row.confidence_level is not None:
            confidences.append(int(row.confidence_level))
        if row.flagged_for_review:
            flagged += 1
        if row.next_review_date is not None and row.next_review_date <= today:
            past_review += 1
        optimized_for.update(row.optimized_for or [])
        accepted.update(row.tradeoffs_accepted or [])
        rejected.update(row.tradeoffs_rejected or [])

    all_outcomes = [outcome for outcomes in outcomes_by_category.values() for outcome in outcomes]
    return AnalyticsSummary(
        period=period,
        category=category,
        total_decisions=len(rows),
        decisions_by_category=dict(by_category.most_common()),
        success_rate_by_category={
            label: _percent(outcomes)
            for label, outcomes in sorted(outcomes_by_category.items())
        },
        optimized_for_frequency=dict(optimized_for.most_common()),
        tradeoffs_accepted_frequency=dict(accepted.most_common()),
        tradeoffs_rejected_frequency=dict(rejected.most_common()),
        average_confidence=round(sum(confidences) / len(confidences), 1) if confidences else 0.0,
        decisions_with_outcomes=len(all_outcomes),
        overall_success_rate=_percent(all_outcomes),
        flagged_for_review_count=flagged,
        decisions_past_review_date=past_review,
    )


def _percent(outcomes: list[bool]) -> int:
    if not outcomes:
        return 0
    return round(sum(1 for outcome in outcomes if outcome) / len(outcomes) * 100)
