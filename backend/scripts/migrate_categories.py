"""Remap decisions that still use a retired category.

Usage (from backend directory):
    python scripts/migrate_categories.py --dry-run
    python scripts/migrate_categories.py
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.schema.categories import FALLBACK_CATEGORY, RETIRED_CATEGORY_VALUES
from app.services.category_migration import assert_no_retired_categories, remap_retired_categories


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Remap retired decision categories.")
    parser.add_argument(
        "--fallback",
        default=FALLBACK_CATEGORY,
        help=f"Category to assign to affected decisions (default: {FALLBACK_CATEGORY})",
    )
    parser.add_argument(
        "--retired",
        nargs="+",
        default=list(RETIRED_CATEGORY_VALUES),
        help="Retired category values to remap.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Only report affected counts.")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args()

    with SessionLocal() as db:
        counts = remap_retired_categories(db, args.retired, fallback=args.fallback, dry_run=args.dry_run)
        if not args.dry_run:
            assert_no_retired_categories(db, args.retired)

    for category, count in counts.items():
        print(f"{category}={count}")
    print("Dry run complete" if args.dry_run else f"Remapped to {args.fallback}")


if __name__ == "__main__":
    main()
