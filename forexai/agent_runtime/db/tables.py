"""SQLAlchemy ORM models for PostgreSQL.

Single source of truth for the database schema.  Alembic reads
``Base.metadata`` to autogenerate migration scripts.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

TimestampTZ = DateTime(timezone=True)


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class DailyAnalysis(Base):
    """One saved daily trading plan (market bias + key levels)."""

    __tablename__ = "daily_analysis"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bias: Mapped[str] = mapped_column(Text, nullable=False)
    support_resistance_levels: Mapped[list] = mapped_column(JSONB, nullable=False, server_default="[]")
    reasoning: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())
