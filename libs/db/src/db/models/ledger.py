from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    TypeDecorator,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Money(TypeDecorator[Decimal]):
    """``Numeric(18, 2)`` that round-trips exactly on SQLite as well.

    SQLite has no decimal storage and pysqlite binds ``Numeric`` as a float,
    which drops cents past ~15 significant digits; there the amount is kept as
    its canonical text instead.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(24))
        return dialect.type_descriptor(Numeric(18, 2))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return str(Decimal(value).quantize(Decimal("0.01")))

    def process_result_value(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return Decimal(value)


# ---------------------------
# Reference: lg_categories
# ---------------------------


class LedgerCategory(Base):
    __tablename__ = "lg_categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    # Case-sensitive, globally unique. The resolver relies on the unique index
    # to detect concurrent creation of the same title.
    title: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    __table_args__ = (CheckConstraint("length(title) > 0", name="ck_lg_category_title"),)


# ---------------------------
# Core: lg_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "lg_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    # Set once at creation; the core never re-points a transaction.
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("lg_categories.id"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    category: Mapped[LedgerCategory] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("value > 0", name="ck_lg_tx_value_positive"),
        CheckConstraint("type in ('income','outcome')", name="ck_lg_tx_type"),
        CheckConstraint("length(title) > 0", name="ck_lg_tx_title"),
    )


__all__ = [
    "Money",
    "Base",
    "LedgerCategory",
    "LedgerTransaction",
]
