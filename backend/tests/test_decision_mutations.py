"""Service-level tests for decision writes and their effect on search."""

from __future__ import annotations

import unittest
from datetime import date

from pydantic import ValidationError
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.errors import SelfReferenceError
from app.models.base import Base
from app.models.decision import Decision
from app.schemas.decision import (
    DecisionCreate,
    DecisionUpdate,
    FlagForReviewRequest,
    OutcomeUpdateRequest,
    SimilarLinkRequest,
)
from app.services.decisions import (
    create_decision,
    delete_decision,
    flag_for_review,
    get_decision,
    list_projects,
    mark_similar,
    set_outcome,
    update_decision,
)
from app.services.search import search_decisions


def _payload(title: str, **fields: object) -> DecisionCreate:
    return DecisionCreate(
        title=title,
        business_context=fields.pop("business_context", "Traffic doubled last quarter."),
        problem_statement=fields.pop("problem_statement", "Reports time out."),
        **fields,
    )


class DecisionMutationTests(unittest.TestCase):
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

    def test_create_cleans_payload_and_indexes(self) -> None:
        decision = create_decision(
            self.db,
            _payload(
                "  Adopt read replicas  ",
                category="data-storage",
                tags=[" db ", "db", "", "scaling"],
                optimized_for=["performance"],
                reasoning="Offloads reporting queries from the primary.",
            ),
        )

        self.assertEqual(decision.title, "Adopt read replicas")
        self.assertEqual(decision.category, "data-storage")
        self.assertEqual(decision.tags, ["db", "scaling"])
        self.assertEqual(decision.optimized_for, ["performance"])
        self.assertEqual(decision.search_vector.get("replica"), "A")
        self.assertEqual(decision.search_vector.get("offload"), "B")

        page = search_decisions(self.db, {"search": "replicas"})
        self.assertEqual([item.id for item in page.results], [decision.id])

    def test_create_rejects_retired_category_and_short_reasoning(self) -> None:
        with self.assertRaises(ValidationError):
            _payload("Hire a DBA", category="hiring")
        with self.assertRaises(ValidationError):
            _payload("Too short", reasoning="because")

    def test_update_reindexes_and_bumps_date_updated(self) -> None:
        decision = create_decision(self.db, _payload("Queue for reports"))
        created_at = decision.date_created
        first_update = decision.date_updated

        updated = update_decision(self.db, decision.id, DecisionUpdate(chosen_option="Managed broker"))
        assert updated is not None

        self.assertEqual(updated.date_created, created_at)
        self.assertGreaterEqual(updated.date_updated, first_update)
        self.assertEqual(updated.search_vector.get("broker"), "C")
        self.assertEqual(self._search_ids("broker"), [decision.id])

    def test_update_of_non_text_field_keeps_row_searchable(self) -> None:
        decision = create_decision(self.db, _payload("Shard the events table", confidence_level=4))

        update_decision(self.db, decision.id, DecisionUpdate(confidence_level=9))

        page = search_decisions(self.db, {"search": "shard", "confidence_min": 9})
        self.assertEqual([item.id for item in page.results], [decision.id])

    def test_update_rewording_drops_old_terms(self) -> None:
        decision = create_decision(self.db, _payload("Use Redis for sessions"))

        update_decision(self.db, decision.id, DecisionUpdate(title="Use cookies for sessions"))

        self.assertEqual(self._search_ids("redis"), [])
        self.assertEqual(self._search_ids("cookies"), [decision.id])

    def test_update_validation(self) -> None:
        with self.assertRaises(ValidationError):
            DecisionUpdate()
        with self.assertRaises(ValidationError):
            DecisionUpdate(title=None)
        with self.assertRaises(ValidationError):
            DecisionUpdate.model_validate({"id": "other"})
        with self.assertRaises(ValidationError):
            DecisionUpdate.model_validate({"search_vector": "x"})
        self.assertIsNone(DecisionUpdate(notes=None).notes)

    def test_update_and_delete_missing_decision(self) -> None:
        self.assertIsNone(update_decision(self.db, "missing", DecisionUpdate(notes="x")))
        self.assertFalse(delete_decision(self.db, "missing"))
        self.assertIsNone(get_decision(self.db, "missing"))

    def test_delete_removes_from_search(self) -> None:
        decision = create_decision(self.db, _payload("Retire the legacy cron box"))

        self.assertTrue(delete_decision(self.db, decision.id))

        self.assertIsNone(get_decision(self.db, decision.id))
        self.assertEqual(self._search_ids("legacy"), [])

    def test_set_outcome_and_filter(self) -> None:
        decision = create_decision(self.db, _payload("Cache rendered charts"))

        updated = set_outcome(
            self.db,
            decision.id,
            OutcomeUpdateRequest(outcome="Load time halved", outcome_success=True, lessons_learned=" Measure first "),
        )
        assert updated is not None

        self.assertTrue(updated.outcome_success)
        self.assertIsNotNone(updated.outcome_date)
        self.assertEqual(updated.lessons_learned, "Measure first")
        page = search_decisions(self.db, {"outcome_status": "success"})
        self.assertEqual([item.id for item in page.results], [decision.id])

    def test_flag_for_review(self) -> None:
        decision = create_decision(self.db, _payload("Pick a feature flag vendor"))

        updated = flag_for_review(
            self.db,
            decision.id,
            FlagForReviewRequest(
                flagged_for_review=True,
                revisit_reason="Pricing changed",
                next_review_date=date(2026, 12, 1),
            ),
        )
        assert updated is not None

        self.assertTrue(updated.flagged_for_review)
        self.assertEqual(updated.revisit_reason, "Pricing changed")
        self.assertEqual(updated.next_review_date, date(2026, 12, 1))
        page = search_decisions(self.db, {"flagged": "true"})
        self.assertEqual([item.id for item in page.results], [decision.id])

    def test_mark_similar_links_both_ways(self) -> None:
        first = create_decision(self.db, _payload("Postgres for analytics"))
        second = create_decision(self.db, _payload("Postgres for billing"))

        linked = mark_similar(
            self.db,
            first.id,
            SimilarLinkRequest(similar_to_id=second.id, reason="Same store", comparison="Both OLTP"),
        )
        assert linked is not None
        relinked = mark_similar(
            self.db,
            first.id,
            SimilarLinkRequest(similar_to_id=second.id, reason="Same store, same team"),
        )
        assert relinked is not None

        other = get_decision(self.db, second.id)
        assert other is not None
        self.assertEqual(relinked.similar_decision_ids, [second.id])
        self.assertEqual(other.similar_decision_ids, [first.id])
        self.assertEqual(len(relinked.similarity_notes), 1)
        self.assertEqual(relinked.similarity_notes[0]["reason"], "Same store, same team")

    def test_mark_similar_rejects_self_and_missing(self) -> None:
        decision = create_decision(self.db, _payload("Only one"))

        with self.assertRaises(SelfReferenceError):
            mark_similar(self.db, decision.id, SimilarLinkRequest(similar_to_id=decision.id, reason="Same"))
        self.assertIsNone(
            mark_similar(self.db, decision.id, SimilarLinkRequest(similar_to_id="missing", reason="Same"))
        )

    def test_list_projects(self) -> None:
        create_decision(self.db, _payload("One", project_name="web"))
        create_decision(self.db, _payload("Two", project_name="api"))
        create_decision(self.db, _payload("Three", project_name="web"))
        create_decision(self.db, _payload("Four"))

        self.assertEqual(list_projects(self.db), ["api", "web"])

    def _search_ids(self, term: str) -> list[str]:
        page = search_decisions(self.db, {"search": term, "include_metadata": False})
        return [item.id for item in page.results]


if __name__ == "__main__":
    unittest.main()
