"""Relevance-ranked text search over decision narrative fields.

Tokenization, normalization and scoring belong to the store. PostgreSQL uses
its full-text engine (``websearch_to_tsquery`` + ``ts_rank``) over the stored
``tsvector``. Other dialects fall back to scoring the stored term-weight map
in Python, which keeps SQLite-backed tests and local runs working.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import ColumnElement, case, cast, false, func, literal, select
from sqlalchemy.dialects.postgresql import REGCONFIG
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.decision import Decision
from app.services.indexing import WEIGHT_SCORES, is_postgres, tokenize


@dataclass(slots=True)
class TextSearchPlan:
    """SQL pieces that restrict a query to text matches and rank them."""

    condition: ColumnElement[bool]
    rank: ColumnElement[float]


class TextSearch(Protocol):
    """Pluggable relevance search primitive."""

    def plan(
        self,
        db: Session,
        query: str,
        conditions: Sequence[ColumnElement[bool]],
    ) -> TextSearchPlan:
        """Return the match predicate and relevance expression for ``query``."""


@dataclass(slots=True)
class PostgresTextSearch:
    """Native PostgreSQL full-text search over ``decisions.search_vector``."""

    text_config: str = "english"

    def plan(
        self,
        db: Session,
        query: str,
        conditions: Sequence[ColumnElement[bool]],
    ) -> TextSearchPlan:
        # websearch_to_tsquery accepts arbitrary user input without raising.
        tsquery = func.websearch_to_tsquery(cast(literal(self.text_config), REGCONFIG), query)
        return TextSearchPlan(
            condition=Decision.search_vector.op("@@")(tsquery),
            rank=func.ts_rank(Decision.search_vector, tsquery),
        )


class TermWeightTextSearch:
    """Fallback search scoring stored term-weight maps in Python."""

    def plan(
        self,
        db: Session,
        query: str,
        conditions: Sequence[ColumnElement[bool]],
    ) -> TextSearchPlan:
        terms = tokenize(query)
        if not terms:
            return TextSearchPlan(condition=false(), rank=literal(0.0))

        rows = db.execute(select(Decision.id, Decision.search_vector).where(*conditions)).all()
        scores: dict[str, float] = {}
        for decision_id, term_weights in rows:
            score = score_terms(terms, term_weights)
            if score > 0.0:
                scores[decision_id] = score
        if not scores:
            return TextSearchPlan(condition=false(), rank=literal(0.0))
        return TextSearchPlan(
            condition=Decision.id.in_(list(scores)),
            rank=case(scores, value=Decision.id, else_=0.0),
        )


def score_terms(terms: Sequence[str], term_weights: object) -> float:
    """Score a term-weight map; every query term must be present (AND semantics)."""

    if not isinstance(term_weights, dict) or not terms:
        return 0.0
    score = 0.0
    for term in dict.fromkeys(terms):
        weight = term_weights.get(term)
        if weight is None:
            return 0.0
        score += WEIGHT_SCORES.get(str(weight), 0.0)
    return score


def get_text_search(db: Session) -> TextSearch:
    """Return the text search implementation for the session's dialect."""

    if is_postgres(db):
        return PostgresTextSearch(text_config=get_settings().search_text_config)
    return TermWeightTextSearch()
