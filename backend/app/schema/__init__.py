"""Controlled vocabularies for decision classification."""

from app.schema.categories import (
    DECISION_CATEGORY_VALUES,
    FALLBACK_CATEGORY,
    RETIRED_CATEGORY_VALUES,
    DecisionCategory,
    DecisionType,
    OptimizedFor,
    is_decision_category,
)

__all__ = [
    "DECISION_CATEGORY_VALUES",
    "FALLBACK_CATEGORY",
    "RETIRED_CATEGORY_VALUES",
    "DecisionCategory",
    "DecisionType",
    "OptimizedFor",
    "is_decision_category",
]
