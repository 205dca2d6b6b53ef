"""Analytics summary schemas."""

from typing import Literal

from pydantic import BaseModel

AnalyticsPeriod = Literal["week", "month", "quarter", "all"]


class AnalyticsSummary(BaseModel):
    """Aggregated decision-making patterns for one period."""

    period: AnalyticsPeriod
    category: str | None
    total_decisions: int
    decisions_by_category: dict[str, int]
    success_rate_by_category: dict[str, int]
    optimized_for_frequency: dict[str, int]
    tradeoffs_accepted_frequency: dict[str, int]
    tradeoffs_rejected_frequency: dict[str, int]
    average_confidence: float
    decisions_with_outcomes: int
    overall_success_rate: int
    flagged_for_review_count: int
    decisions_past_review_date: int
