"""Validation and sanitization of decision search parameters.

Every field is checked independently and all violations are reported
together. Only three inputs are corrected instead of rejected: a negative
offset becomes 0, a page size above ``MAX_LIMIT`` becomes ``MAX_LIMIT``, and
``sort=relevance`` without a search term becomes ``date-desc``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from app.errors import FieldError, SearchValidationError
from app.schema.categories import DECISION_CATEGORY_VALUES, DecisionCategory, is_decision_category
from app.schemas.decision import clean_string_list
from app.schemas.search import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_SEARCH_LENGTH,
    MAX_TAG_COUNT,
    OUTCOME_STATUSES,
    SORT_ALIASES,
    SORT_OPTIONS,
    SearchFilters,
)

_TRUE_STRINGS = {"true"}
_FALSE_STRINGS = {"false"}


class _IntegerParseError(ValueError):
    pass


def validate_search_filters(raw: Mapping[str, object]) -> SearchFilters:
    """Return sanitized filters or raise ``SearchValidationError`` listing every violation."""

    errors: list[FieldError] = []

    # Silent corrections run first and never contribute errors of their own kind.
    limit = _validate_limit(raw.get("limit"), errors)
    offset = _validate_offset(raw.get("offset"), errors)

    search = _validate_search(raw.get("search"), errors)
    category = _validate_category(raw.get("category"), errors)
    project = _validate_project(raw.get("project"), errors)
    tags = _validate_tags(raw.get("tags"), errors)
    confidence_min, confidence_max = _validate_confidence_range(
        raw.get("confidence_min"),
        raw.get("confidence_max"),
        errors,
    )
    outcome_status = _validate_outcome_status(raw.get("outcome_status"), errors)
    flagged = _validate_boolean("flagged", raw.get("flagged"), errors)
    include_metadata = _validate_boolean("include_metadata", raw.get("include_metadata"), errors)
    sort = _validate_sort(raw.get("sort"), has_search=search is not None, errors=errors)

    if errors:
        raise SearchValidationError(errors)

    return SearchFilters(
        search=search,
        category=category,
        project=project,
        tags=tags,
        confidence_min=confidence_min,
        confidence_max=confidence_max,
        outcome_status=outcome_status,
        flagged=flagged,
        sort=sort,
        limit=limit,
        offset=offset,
        include_metadata=True if include_metadata is None else include_metadata,
    )


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_integer(value: object) -> int:
    if isinstance(value, bool):
        raise _IntegerParseError("must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError as exc:
            raise _IntegerParseError("must be a number") from exc
    if math.isnan(number) or math.isinf(number):
        raise _IntegerParseError("must be a number")
    if not number.is_integer():
        raise _IntegerParseError("must be an integer")
    return int(number)


def _validate_limit(value: object, errors: list[FieldError]) -> int:
    if _is_blank(value):
        return DEFAULT_LIMIT
    try:
        limit = _parse_integer(value)
    except _IntegerParseError as exc:
        errors.append(FieldError("limit", f"limit {exc}"))
        return DEFAULT_LIMIT
    if limit < 1:
        errors.append(FieldError("limit", "limit must be at least 1"))
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def _validate_offset(value: object, errors: list[FieldError]) -> int:
    if _is_blank(value):
        return 0
    try:
        offset = _parse_integer(value)
    except _IntegerParseError as exc:
        errors.append(FieldError("offset", f"offset {exc}"))
        return 0
    return max(offset, 0)


def _validate_search(value: object, errors: list[FieldError]) -> str | None:
    if _is_blank(value):
        return None
    if not isinstance(value, str):
        errors.append(FieldError("search", "search must be a string"))
        return None
    trimmed = value.strip()
    if len(trimmed) > MAX_SEARCH_LENGTH:
        errors.append(
            FieldError("search", f"search term too long (max {MAX_SEARCH_LENGTH} characters)")
        )
        return None
    return " ".join(trimmed.split())


def _validate_category(value: object, errors: list[FieldError]) -> DecisionCategory | None:
    if _is_blank(value):
        return None
    clean = value.strip() if isinstance(value, str) else value
    if not isinstance(clean, str) or not is_decision_category(clean):
        errors.append(
            FieldError(
                "category",
                f"category must be one of: {', '.join(DECISION_CATEGORY_VALUES)}",
            )
        )
        return None
    return DecisionCategory(clean)


def _validate_project(value: object, errors: list[FieldError]) -> str | None:
    if _is_blank(value):
        return None
    if not isinstance(value, str):
        errors.append(FieldError("project", "project must be a string"))
        return None
    return value.strip()


def _validate_tags(value: object, errors: list[FieldError]) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        candidates: list[object] = value.split(",")
    elif isinstance(value, (list, tuple)):
        candidates = list(value)
    else:
        errors.append(FieldError("tags", "tags must be a comma-separated string or a list"))
        return None
    if any(not isinstance(tag, str) for tag in candidates):
        errors.append(FieldError("tags", "all tags must be strings"))
        return None

    tags = clean_string_list(candidates)  # type: ignore[arg-type]
    if len(tags) > MAX_TAG_COUNT:
        errors.append(FieldError("tags", f"too many tags (max {MAX_TAG_COUNT})"))
        return None
    return tags or None


def _validate_confidence_value(field: str, value: object, errors: list[FieldError]) -> int | None:
    if _is_blank(value):
        return None
    try:
        number = _parse_integer(value)
    except _IntegerParseError as exc:
        errors.append(FieldError(field, f"{field} {exc}"))
        return None
    if number < 1 or number > 10:
        errors.append(FieldError(field, f"{field} must be between 1 and 10"))
        return None
    return number


def _validate_confidence_range(
    min_value: object,
    max_value: object,
    errors: list[FieldError],
) -> tuple[int | None, int | None]:
    confidence_min = _validate_confidence_value("confidence_min", min_value, errors)
    confidence_max = _validate_confidence_value("confidence_max", max_value, errors)
    if confidence_min is not None and confidence_max is not None and confidence_min > confidence_max:
        errors.append(
            FieldError("confidence_min", "confidence_min cannot be greater than confidence_max")
        )
        return None, None
    return confidence_min, confidence_max


def _validate_outcome_status(value: object, errors: list[FieldError]) -> str:
    if _is_blank(value):
        return "all"
    clean = value.strip().lower() if isinstance(value, str) else value
    if clean not in OUTCOME_STATUSES:
        errors.append(
            FieldError("outcome_status", f"outcome_status must be one of: {', '.join(OUTCOME_STATUSES)}")
        )
        return "all"
    return str(clean)


def _validate_boolean(field: str, value: object, errors: list[FieldError]) -> bool | None:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        clean = value.strip().lower()
        if clean in _TRUE_STRINGS:
            return True
        if clean in _FALSE_STRINGS:
            return False
    errors.append(FieldError(field, f"{field} must be a boolean (true or false)"))
    return None


def _validate_sort(value: object, *, has_search: bool, errors: list[FieldError]) -> str:
    if _is_blank(value):
        return "relevance" if has_search else "date-desc"
    clean = value.strip().lower() if isinstance(value, str) else value
    if isinstance(clean, str):
        clean = SORT_ALIASES.get(clean, clean)
    if clean not in SORT_OPTIONS:
        errors.append(FieldError("sort", f"sort must be one of: {', '.join(SORT_OPTIONS)}"))
        return "date-desc"
    if clean == "relevance" and not has_search:
        return "date-desc"
    return str(clean)
