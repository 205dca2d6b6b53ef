"""ORM models package exports."""

from app.models.decision import Decision

__all__ = ["Decision"]
