"""Tests for retiring category values without orphaning records."""

from __future__ import annotations

import unittest

from sqlalchemy import create_engine, delete, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base
from app.models.decision import Decision
from app.schema.categories import DECISION_CATEGORY_VALUES, RETIRED_CATEGORY_VALUES
from app.services.category_migration import (
    CategoryMigrationError,
    assert_no_retired_categories,
    count_by_category,
    remap_retired_categories,
)
from app.services.indexing import reindex
from app.services.search import search_decisions


class CategoryMigrationTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self.db.execute(delete(Decision))
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def test_retired_values_are_not_current(self) -> None:
        for value in RETIRED_CATEGORY_VALUES:
            self.assertNotIn(value, DECISION_CATEGORY_VALUES)

    def test_store_rejects_unknown_category(self) -> None:
        with self.assertRaises(IntegrityError):
            self._add("Bad row", "vendor")
        self.db.rollback()

    def test_remap_moves_legacy_rows_to_fallback(self) -> None:
        hiring = self._add_legacy("Hire a DBA", "hiring")
        vendor = self._add_legacy("Pick an APM vendor", "vendor")
        kept = self._add("Split the monolith", "architecture")

        counts = remap_retired_categories(self.db)

        self.assertEqual(counts, {"hiring": 1, "team-structure": 0, "vendor": 1})
        categories = dict(self.db.execute(select(Decision.id, Decision.category)).all())
        self.assertEqual(categories, {hiring: "other", vendor: "other", kept: "architecture"})
        assert_no_retired_categories(self.db)

        page = search_decisions(self.db, {"category": "other", "search": "vendor"})
        self.assertEqual([item.id for item in page.results], [vendor])

    def test_dry_run_changes_nothing(self) -> None:
        legacy = self._add_legacy("Reorganize squads", "team-structure")

        counts = remap_retired_categories(self.db, dry_run=True)

        self.assertEqual(counts["team-structure"], 1)
        self.assertEqual(count_by_category(self.db, ["team-structure"]), {"team-structure": 1})
        self.assertEqual(self.db.scalar(select(Decision.category).where(Decision.id == legacy)), "team-structure")
        with self.assertRaises(CategoryMigrationError):
            assert_no_retired_categories(self.db)

    def test_guards_against_invalid_targets(self) -> None:
        with self.assertRaises(CategoryMigrationError):
            remap_retired_categories(self.db, fallback="hiring")
        with self.assertRaises(CategoryMigrationError):
            remap_retired_categories(self.db, ["architecture"])

    def test_nothing_to_remap(self) -> None:
        self.assertEqual(remap_retired_categories(self.db, ["other"]), {})
        self.assertEqual(remap_retired_categories(self.db), {value: 0 for value in RETIRED_CATEGORY_VALUES})

    def _add(self, title: str, category: str) -> str:
        decision = Decision(
            title=title,
            category=category,
            business_context="Context.",
            problem_statement="Problem.",
        )
        reindex(self.db, decision)
        self.db.add(decision)
        self.db.commit()
        return decision.id

    def _add_legacy(self, title: str, category: str) -> str:
        # Rows written before the category set changed.
        self.db.execute(text("PRAGMA ignore_check_constraints = ON"))
        try:
            return self._add(title, category)
        finally:
            self.db.execute(text("PRAGMA ignore_check_constraints = OFF"))


if __name__ == "__main__":
    unittest.main()
