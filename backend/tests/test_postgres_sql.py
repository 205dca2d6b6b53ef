"""Checks the SQL emitted for PostgreSQL without a live server."""

from __future__ import annotations

import unittest
from unittest import mock

from sqlalchemy import ClauseElement
from sqlalchemy.dialects.postgresql import psycopg

from app.config import get_settings
from app.models.decision import Decision
from app.schemas.search import SearchFilters
from app.services.filter_metadata import list_distinct_tags
from app.services.indexing import SEARCH_FIELD_WEIGHTS, build_tsvector_expression, reindex
from app.services.search import build_filter_conditions
from app.services.text_search import PostgresTextSearch, get_text_search


def _sql(clause: ClauseElement) -> str:
    return str(clause.compile(dialect=psycopg.dialect()))


def _postgres_session() -> mock.MagicMock:
    db = mock.MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"
    return db


class PostgresSqlTests(unittest.TestCase):
    def setUp(self) -> None:
        self.decision = Decision(
            title="Caching layer",
            business_context="Dashboards are slow.",
            problem_statement="P95 above two seconds.",
            notes="Revisit after launch.",
        )

    def test_setweight_receives_char_literal_weights(self) -> None:
        sql = _sql(build_tsvector_expression(self.decision, "english"))

        self.assertEqual(sql.count("setweight(to_tsvector(CAST("), len(SEARCH_FIELD_WEIGHTS))
        for _, weight in SEARCH_FIELD_WEIGHTS:
            self.assertIn(f", '{weight}')", sql)
        self.assertNotIn("setweight_", sql)
        self.assertIn(" || ", sql)

    def test_reindex_on_postgres_assigns_sql_expression(self) -> None:
        reindex(_postgres_session(), self.decision)

        self.assertIsInstance(self.decision.search_vector, ClauseElement)
        self.assertIn("to_tsvector", _sql(self.decision.search_vector))

    def test_text_search_plan(self) -> None:
        plan = PostgresTextSearch(text_config="simple").plan(_postgres_session(), "cached pages", [])

        condition = _sql(plan.condition)
        rank = _sql(plan.rank)
        self.assertIn("decisions.search_vector @@ websearch_to_tsquery(CAST(", condition)
        self.assertIn("AS REGCONFIG)", condition)
        self.assertIn("ts_rank(decisions.search_vector, websearch_to_tsquery(", rank)

    def test_get_text_search_uses_configured_language(self) -> None:
        search = get_text_search(_postgres_session())

        self.assertIsInstance(search, PostgresTextSearch)
        self.assertEqual(search.text_config, get_settings().search_text_config)

    def test_tags_filter_uses_array_overlap(self) -> None:
        conditions = build_filter_conditions(_postgres_session(), SearchFilters(tags=["db", "perf"]))

        self.assertEqual(len(conditions), 1)
        sql = _sql(conditions[0])
        self.assertIn("decisions.tags && ", sql)
        self.assertNotIn("json_each", sql)

    def test_distinct_tags_unnest_array(self) -> None:
        db = _postgres_session()

        self.assertEqual(list_distinct_tags(db), [])

        statement = db.scalars.call_args.args[0]
        sql = _sql(statement)
        self.assertIn("unnest(decisions.tags)", sql)
        self.assertIn("DISTINCT", sql)


if __name__ == "__main__":
    unittest.main()
