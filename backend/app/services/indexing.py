"""Search-vector maintenance for decisions.

Every write path calls ``reindex`` before committing, whichever field
changed, so filters and ranked text search always see the same row state.
"""

from __future__ import annotations

import re

from sqlalchemy import ColumnElement, cast, func, literal, literal_column
from sqlalchemy.dialects.postgresql import REGCONFIG
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.decision import Decision

# (attribute, tsvector weight); A ranks highest.
SEARCH_FIELD_WEIGHTS: tuple[tuple[str, str], ...] = (
    ("title", "A"),
    ("business_context", "B"),
    ("problem_statement", "B"),
    ("reasoning", "B"),
    ("chosen_option", "C"),
    ("notes", "D"),
)
WEIGHT_SCORES: dict[str, float] = {"A": 1.0, "B": 0.4, "C": 0.2, "D": 0.1}

_TOKEN_RE = re.compile(r"\w+")
_SUFFIXES = ("ing", "ed", "es", "s")


def is_postgres(db: Session) -> bool:
    return db.get_bind().dialect.name == "postgresql"


def normalize_token(token: str) -> str:
    """Fold simple inflections so ``caching``/``cached``/``caches`` share a term."""

    for suffix in _SUFFIXES:
        if token.endswith(suffix) and len(token) - len(suffix) >= 3:
            return token[: -len(suffix)]
    return token


def tokenize(text: str | None) -> list[str]:
    """Case-folded word tokens in any script, normalized; punctuation is ignored."""

    if not text:
        return []
    return [normalize_token(token) for token in _TOKEN_RE.findall(text.casefold())]


def build_term_weights(decision: Decision) -> dict[str, str]:
    """Map each narrative term to the best weight it appears under."""

    weights: dict[str, str] = {}
    for attribute, weight in SEARCH_FIELD_WEIGHTS:
        for term in tokenize(getattr(decision, attribute, None)):
            current = weights.get(term)
            if current is None or WEIGHT_SCORES[weight] > WEIGHT_SCORES[current]:
                weights[term] = weight
    return dict(sorted(weights.items()))


def build_tsvector_expression(decision: Decision, text_config: str) -> ColumnElement[object]:
    """Return the weighted ``tsvector`` SQL expression for a decision's narrative fields."""

    config = cast(literal(text_config), REGCONFIG)
    expression: ColumnElement[object] | None = None
    for attribute, weight in SEARCH_FIELD_WEIGHTS:
        value = getattr(decision, attribute, None) or ""
        # setweight() takes a "char" weight; a bound string would be sent as varchar.
        part = func.setweight(func.to_tsvector(config, literal(value)), literal_column(f"'{weight}'"))
        expression = part if expression is None else expression.op("||")(part)
    assert expression is not None
    return expression


def reindex(db: Session, decision: Decision) -> None:
    """Recompute ``decision.search_vector`` as part of the caller's transaction."""

    if is_postgres(db):
        decision.search_vector = build_tsvector_expression(decision, get_settings().search_text_config)
    else:
        decision.search_vector = build_term_weights(decision)
