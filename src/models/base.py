"""SQLAlchemy declarative base and shared mixins.

Every table gets a store-assigned integer `id` and a `created_at` timestamp.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class CreatedAtMixin:
    """Mixin adding `created_at`, set by PostgreSQL at insert."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class IdMixin(CreatedAtMixin):
    """Mixin adding a serial integer primary key plus `created_at`."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
