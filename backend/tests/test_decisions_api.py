"""HTTP-level tests for the decision routes and error envelopes."""

from __future__ import annotations

import unittest
from collections.abc import Iterator
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.dependencies import get_db
from app.main import app
from app.models.base import Base
from app.models.decision import Decision

_DECISION = {
    "title": "Adopt a managed queue",
    "category": "architecture",
    "tags": ["ops", "queue"],
    "business_context": "Nightly jobs overlap.",
    "problem_statement": "Cron has no locking.",
    "reasoning": "Retries and visibility without running our own broker.",
    "confidence_level": 7,
}


class DecisionsApiTests(unittest.TestCase):
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
        with self.SessionLocal() as db:
            db.execute(delete(Decision))
            db.commit()

        def _override_get_db() -> Iterator[Session]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _override_get_db
        # No context manager: the startup warm-up would hit the configured database.
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_create_read_update_delete(self) -> None:
        created = self.client.post("/decisions", json=_DECISION)
        self.assertEqual(created.status_code, 201)
        decision_id = created.json()["data"]["id"]

        fetched = self.client.get(f"/decisions/{decision_id}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["data"]["tags"], ["ops", "queue"])
        self.assertNotIn("search_vector", fetched.json()["data"])

        patched = self.client.patch(f"/decisions/{decision_id}", json={"confidence_level": 9})
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["data"]["confidence_level"], 9)

        deleted = self.client.delete(f"/decisions/{decision_id}")
        self.assertEqual(deleted.json()["data"], {"id": decision_id, "deleted": True})
        self.assertEqual(self.client.get(f"/decisions/{decision_id}").status_code, 404)

    def test_search_response_shape(self) -> None:
        self.client.post("/decisions", json=_DECISION)

        response = self.client.get("/decisions", params={"search": "queue", "tags": "ops,db"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["total"], 1)
        self.assertFalse(data["hasMore"])
        self.assertEqual(data["limit"], 20)
        self.assertEqual(data["offset"], 0)
        self.assertEqual(data["metadata"]["availableTags"], ["ops", "queue"])
        self.assertEqual(data["metadata"]["confidenceRange"], {"min": 7, "max": 7})

    def test_search_without_metadata(self) -> None:
        response = self.client.get("/decisions", params={"include_metadata": "false"})

        self.assertIsNone(response.json()["data"]["metadata"])

    def test_search_validation_lists_every_field(self) -> None:
        response = self.client.get(
            "/decisions",
            params={"limit": "0", "category": "bogus", "confidence_min": "11"},
        )

        self.assertEqual(response.status_code, 400)
        error = response.json()["error"]
        self.assertEqual(error["code"], "validation_error")
        self.assertEqual({item["field"] for item in error["errors"]}, {"limit", "category", "confidence_min"})

    def test_bad_include_metadata_joins_other_field_errors(self) -> None:
        response = self.client.get(
            "/decisions",
            params={
                "confidence_min": "11",
                "sort": "bogus",
                "category": "invalid",
                "include_metadata": "maybe",
            },
        )

        self.assertEqual(response.status_code, 400)
        fields = {item["field"] for item in response.json()["error"]["errors"]}
        self.assertEqual(fields, {"confidence_min", "sort", "category", "include_metadata"})

    def test_body_validation_uses_same_envelope(self) -> None:
        response = self.client.post("/decisions", json={**_DECISION, "title": "", "category": "hiring"})

        self.assertEqual(response.status_code, 400)
        fields = {item["field"] for item in response.json()["error"]["errors"]}
        self.assertEqual(fields, {"title", "category"})

    def test_update_rejects_immutable_fields(self) -> None:
        decision_id = self.client.post("/decisions", json=_DECISION).json()["data"]["id"]

        response = self.client.patch(f"/decisions/{decision_id}", json={"date_created": "2020-01-01T00:00:00Z"})

        self.assertEqual(response.status_code, 400)

    def test_invalid_and_unknown_ids(self) -> None:
        self.assertEqual(self.client.get("/decisions/not-a-uuid").status_code, 400)
        missing = self.client.get("/decisions/00000000-0000-0000-0000-000000000000")
        self.assertEqual(missing.status_code, 404)

    def test_outcome_flag_and_similar_routes(self) -> None:
        first = self.client.post("/decisions", json=_DECISION).json()["data"]["id"]
        second = self.client.post("/decisions", json={**_DECISION, "title": "Adopt a second queue"}).json()["data"]["id"]

        outcome = self.client.put(f"/decisions/{first}/outcome", json={"outcome": "Stable", "outcome_success": True})
        self.assertTrue(outcome.json()["data"]["outcome_success"])

        flagged = self.client.put(f"/decisions/{first}/flag-for-review", json={"flagged_for_review": True})
        self.assertTrue(flagged.json()["data"]["flagged_for_review"])

        similar = self.client.post(f"/decisions/{first}/similar", json={"similar_to_id": second, "reason": "Same"})
        self.assertEqual(similar.json()["data"]["similar_decision_ids"], [second])

        self_link = self.client.post(f"/decisions/{first}/similar", json={"similar_to_id": first, "reason": "Same"})
        self.assertEqual(self_link.status_code, 400)
        self.assertEqual(self_link.json()["error"]["code"], "bad_request")

    def test_projects_and_analytics_routes(self) -> None:
        self.client.post("/decisions", json={**_DECISION, "project_name": "ops"})

        self.assertEqual(self.client.get("/projects").json()["data"], ["ops"])
        summary = self.client.get("/decisions/analytics/summary", params={"period": "all"})
        self.assertEqual(summary.status_code, 200)
        self.assertEqual(summary.json()["data"]["total_decisions"], 1)
        self.assertEqual(self.client.get("/decisions/analytics/summary", params={"period": "decade"}).status_code, 400)

    def test_store_outage_returns_retryable_503(self) -> None:
        broken = mock.MagicMock()
        broken.get_bind.return_value.dialect.name = "sqlite"
        broken.scalar.side_effect = OperationalError("SELECT 1", {}, Exception("timeout"))
        app.dependency_overrides[get_db] = lambda: broken

        response = self.client.get("/decisions")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(
            response.json(),
            {"error": {"code": "store_unavailable", "message": "Record store unavailable", "retryable": True}},
        )

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()
