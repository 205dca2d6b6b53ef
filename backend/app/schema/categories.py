"""Controlled classification values for decisions.

The category set is versioned. Removing a value is a two-step change: first
rewrite live records with ``remap_retired_categories`` (or the matching Alembic
data migration), then drop the value from ``DecisionCategory``.
"""

from __future__ import annotations

from enum import Enum


class DecisionCategory(str, Enum):
    """Current category set (v2)."""

    ARCHITECTURE = "architecture"
    DATA_STORAGE = "data-storage"
    TOOL_SELECTION = "tool-selection"
    PROCESS = "process"
    PROJECT_MANAGEMENT = "project-management"
    STRATEGIC = "strategic"
    TECHNICAL_DEBT = "technical-debt"
    PERFORMANCE = "performance"
    SECURITY = "security"
    SEARCHING = "searching"
    UI = "ui"
    OTHER = "other"


class DecisionType(str, Enum):
    """Reversibility classification."""

    REVERSIBLE = "reversible"
    SOMEWHAT_REVERSIBLE = "somewhat-reversible"
    IRREVERSIBLE = "irreversible"


class OptimizedFor(str, Enum):
    """Dimensions a decision was optimized for."""

    SPEED = "speed"
    RELIABILITY = "reliability"
    COST = "cost"
    SIMPLICITY = "simplicity"
    SCALABILITY = "scalability"
    PERFORMANCE = "performance"
    LEARNING = "learning"
    FLEXIBILITY = "flexibility"
    SECURITY = "security"
    MAINTAINABILITY = "maintainability"


DECISION_CATEGORY_VALUES: tuple[str, ...] = tuple(category.value for category in DecisionCategory)
DECISION_CATEGORY_SET = set(DECISION_CATEGORY_VALUES)
FALLBACK_CATEGORY = DecisionCategory.OTHER.value

# Values removed in v2; live rows must be remapped before they disappear.
RETIRED_CATEGORY_VALUES: tuple[str, ...] = ("hiring", "team-structure", "vendor")


def is_decision_category(value: str | None) -> bool:
    """Return whether ``value`` is a member of the current category set."""

    return bool(value) and value in DECISION_CATEGORY_SET
