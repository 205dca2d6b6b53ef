"""Shared column type configuration for PostgreSQL with SQLite fallbacks."""

from __future__ import annotations

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY, TSVECTOR

# PostgreSQL keeps native arrays/tsvectors; SQLite stores the same values as JSON.
TEXT_ARRAY_COLUMN_TYPE = ARRAY(Text).with_variant(JSON(), "sqlite")
SEARCH_VECTOR_COLUMN_TYPE = TSVECTOR().with_variant(JSON(), "sqlite")
