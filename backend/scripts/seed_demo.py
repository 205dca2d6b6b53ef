"""Seed a handful of demo decisions.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import delete

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.models.decision import Decision
from app.schemas.decision import DecisionCreate
from app.services.decisions import create_decision


DEFAULT_PROJECT = "demo"


def build_demo_decisions(project_name: str) -> list[DecisionCreate]:
    """Return a deterministic set of demo decisions."""

    return [
        DecisionCreate(
            title="Adopt PostgreSQL full-text search for the decision log",
            project_name=project_name,
            category="searching",
            tags=["search", "postgres"],
            business_context="Users cannot find past decisions once the log grows past a few hundred rows.",
            problem_statement="Substring matching is slow and ranks nothing.",
            chosen_option="Weighted tsvector column with a GIN index",
            reasoning="Keeps search inside the primary store and ranks title matches above notes.",
            confidence_level=8,
            optimized_for=["simplicity", "performance"],
            tradeoffs_accepted=["English-only stemming"],
        ),
        DecisionCreate(
            title="Move background jobs to a managed queue",
            project_name=project_name,
            category="architecture",
            tags=["queue", "ops"],
            business_context="Nightly report jobs overlap and occasionally run twice.",
            problem_statement="The cron-based scheduler has no locking.",
            chosen_option="Managed queue with at-least-once delivery",
            reasoning="Removes scheduler maintenance and gives us retries for free.",
            confidence_level=6,
            optimized_for=["reliability"],
            tradeoffs_accepted=["Vendor lock-in"],
        ),
        DecisionCreate(
            title="Replace hand-rolled date pickers in the UI",
            project_name=project_name,
            category="ui",
            tags=["frontend"],
            business_context="Three slightly different date pickers confuse users.",
            problem_statement="Inconsistent widgets across the filter bar and forms.",
            chosen_option="Single shared component",
            reasoning="One component to test and style instead of three divergent copies.",
            confidence_level=9,
            optimized_for=["simplicity", "maintainability"],
        ),
    ]


def reset_project(db, project_name: str) -> None:
    """Remove existing decisions for the demo project."""

    db.execute(delete(Decision).where(Decision.project_name == project_name))
    db.commit()


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed demo decisions.")
    parser.add_argument(
        "--project",
        default=DEFAULT_PROJECT,
        help=f"Project name to seed under (default: {DEFAULT_PROJECT})",
    )
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Do not delete existing decisions for the project before seeding.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()
    project_name: str = args.project

    with SessionLocal() as db:
        if not args.no_reset:
            reset_project(db, project_name)
        created = [create_decision(db, payload) for payload in build_demo_decisions(project_name)]

    print("Seed complete")
    print(f"project={project_name}")
    print(f"decisions_created={len(created)}")
    print()
    print("Inspect:")
    print(f"  GET /decisions?project={project_name}")
    print("  GET /decisions?search=search&sort=relevance")


if __name__ == "__main__":
    main()
