"""SQLAlchemy metadata registry import for Alembic."""

from app.models import Decision
from app.models.base import Base

__all__ = ["Base", "Decision"]
