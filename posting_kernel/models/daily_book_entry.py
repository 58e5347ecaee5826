"""
Module: posting_kernel.models.daily_book_entry
Responsibility: ORM persistence for daily book entries -- the business events
    (expenses and income) the engine resolves postings for.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - type is EXPENSE or INCOME; gross_amount is strictly positive
      (CHECK constraints).  The engine re-validates both on read.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from posting_kernel.db.base import TrackedBase, UUIDString


class EntryStatus(str, Enum):
    """Lifecycle of a daily book entry.  Posting is decided by the caller."""

    DRAFT = "DRAFT"
    POSTED = "POSTED"
    VOID = "VOID"


class DailyBookEntry(TrackedBase):
    """An expense or income entry recorded against a project."""

    __tablename__ = "daily_book_entries"

    __table_args__ = (
        CheckConstraint("type IN ('EXPENSE', 'INCOME')", name="ck_daily_book_entry_type"),
        CheckConstraint("gross_amount > 0", name="ck_daily_book_entry_amount"),
        Index("idx_daily_book_entry_tenant", "tenant_id"),
    )

    tenant_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=EntryStatus.DRAFT.value,
        nullable=False,
    )

    project_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    event_date: Mapped[date] = mapped_column(Date, nullable=False)

    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    gross_amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    currency_code: Mapped[str] = mapped_column(String(3), nullable=False)

    def __repr__(self) -> str:
        return f"<DailyBookEntry {self.id} {self.type} {self.gross_amount} {self.currency_code}>"
