"""category set v2: retire hiring/team-structure/vendor, add searching/ui

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 00:00:02
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261017_0002"
down_revision: str | None = "20261017_0001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

_RETIRED = ("hiring", "team-structure", "vendor")
_FALLBACK = "other"
_CATEGORIES_V1 = (
    "architecture",
    "data-storage",
    "tool-selection",
    "process",
    "project-management",
    "strategic",
    "technical-debt",
    "performance",
    "security",
    "hiring",
    "team-structure",
    "vendor",
    "other",
)
_CATEGORIES_V2 = (
    "architecture",
    "data-storage",
    "tool-selection",
    "process",
    "project-management",
    "strategic",
    "technical-debt",
    "performance",
    "security",
    "searching",
    "ui",
    "other",
)


def _check(values: tuple[str, ...]) -> str:
    return "category IN (" + ", ".join(f"'{value}'" for value in values) + ")"


def upgrade() -> None:
    # Remap first; the narrower constraint below fails if any row was missed.
    retired = ", ".join(f"'{value}'" for value in _RETIRED)
    op.execute(
        sa.text(
            "UPDATE decisions SET category = :fallback, date_updated = CURRENT_TIMESTAMP "
            f"WHERE category IN ({retired})"
        ).bindparams(fallback=_FALLBACK)
    )
    with op.batch_alter_table("decisions") as batch_op:
        batch_op.drop_constraint("ck_decisions_category_valid", type_="check")
        batch_op.create_check_constraint("ck_decisions_category_valid", _check(_CATEGORIES_V2))


def downgrade() -> None:
    op.execute(
        sa.text(
            "UPDATE decisions SET category = :fallback, date_updated = CURRENT_TIMESTAMP "
            "WHERE category IN ('searching', 'ui')"
        ).bindparams(fallback=_FALLBACK)
    )
    with op.batch_alter_table("decisions") as batch_op:
        batch_op.drop_constraint("ck_decisions_category_valid", type_="check")
        batch_op.create_check_constraint("ck_decisions_category_valid", _check(_CATEGORIES_V1))
