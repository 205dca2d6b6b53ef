"""initial decisions schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

# Category set v1; retired values are remapped in 20261017_0002.
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


def _text_array() -> sa.types.TypeEngine:
    return postgresql.ARRAY(sa.Text()).with_variant(sa.JSON(), "sqlite")


def upgrade() -> None:
    quoted = ", ".join(f"'{value}'" for value in _CATEGORIES_V1)
    op.create_table(
        "decisions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("date_created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("date_updated", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("project_name", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), server_default="other", nullable=False),
        sa.Column("tags", _text_array(), server_default="{}", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("business_context", sa.Text(), nullable=False),
        sa.Column("problem_statement", sa.Text(), nullable=False),
        sa.Column("stakeholders", _text_array(), server_default="{}", nullable=False),
        sa.Column("decision_type", sa.String(length=32), server_default="reversible", nullable=True),
        sa.Column("options_considered", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("chosen_option", sa.Text(), nullable=True),
        sa.Column("reasoning", sa.Text(), nullable=True),
        sa.Column("confidence_level", sa.Integer(), nullable=True),
        sa.Column("tradeoffs_accepted", _text_array(), server_default="{}", nullable=False),
        sa.Column("tradeoffs_rejected", _text_array(), server_default="{}", nullable=False),
        sa.Column("optimized_for", _text_array(), server_default="{}", nullable=False),
        sa.Column("assumptions", _text_array(), server_default="{}", nullable=False),
        sa.Column("invalidation_conditions", _text_array(), server_default="{}", nullable=False),
        sa.Column("next_review_date", sa.Date(), nullable=True),
        sa.Column("revisit_reason", sa.Text(), nullable=True),
        sa.Column("flagged_for_review", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("outcome", sa.Text(), nullable=True),
        sa.Column("outcome_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("outcome_success", sa.Boolean(), nullable=True),
        sa.Column("lessons_learned", sa.Text(), nullable=True),
        sa.Column("similar_decision_ids", _text_array(), server_default="{}", nullable=False),
        sa.Column("related_decision_ids", _text_array(), server_default="{}", nullable=False),
        sa.Column("similarity_notes", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("search_vector", postgresql.TSVECTOR(), nullable=True),
        sa.CheckConstraint(
            "confidence_level IS NULL OR (confidence_level >= 1 AND confidence_level <= 10)",
            name="ck_decisions_confidence_level_range",
        ),
        sa.CheckConstraint(f"category IN ({quoted})", name="ck_decisions_category_valid"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_decisions_date_created", "decisions", ["date_created"], unique=False)
    op.create_index("ix_decisions_category", "decisions", ["category"], unique=False)
    op.create_index("ix_decisions_project_name", "decisions", ["project_name"], unique=False)
    op.create_index("ix_decisions_confidence_level", "decisions", ["confidence_level"], unique=False)
    op.create_index(
        "ix_decisions_date_created_category",
        "decisions",
        ["date_created", "category"],
        unique=False,
    )
    op.create_index(
        "ix_decisions_outcome_success",
        "decisions",
        ["outcome_success"],
        unique=False,
        postgresql_where=sa.text("outcome_success IS NOT NULL"),
    )
    op.create_index(
        "ix_decisions_flagged_for_review",
        "decisions",
        ["flagged_for_review"],
        unique=False,
        postgresql_where=sa.text("flagged_for_review = TRUE"),
    )
    op.create_index("ix_decisions_tags", "decisions", ["tags"], unique=False, postgresql_using="gin")
    op.create_index(
        "ix_decisions_search_vector",
        "decisions",
        ["search_vector"],
        unique=False,
        postgresql_using="gin",
    )


def downgrade() -> None:
    op.drop_index("ix_decisions_search_vector", table_name="decisions")
    op.drop_index("ix_decisions_tags", table_name="decisions")
    op.drop_index("ix_decisions_flagged_for_review", table_name="decisions")
    op.drop_index("ix_decisions_outcome_success", table_name="decisions")
    op.drop_index("ix_decisions_date_created_category", table_name="decisions")
    op.drop_index("ix_decisions_confidence_level", table_name="decisions")
    op.drop_index("ix_decisions_project_name", table_name="decisions")
    op.drop_index("ix_decisions_category", table_name="decisions")
    op.drop_index("ix_decisions_date_created", table_name="decisions")
    op.drop_table("decisions")
