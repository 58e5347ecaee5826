"""
Module: posting_kernel.models.account_mapping
Responsibility: ORM persistence for effective-dated account mapping
    configurations, one row per version.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - effective_to is NULL or >= effective_from (CHECK constraint).
    - (tenant_id, rule_family, version, effective_from) is unique.
    - Rows are append-only: a new version is a new row.

Non-goals:
    - Overlapping ranges are NOT rejected here.  The mapping resolver
      selects among overlapping rows by latest effective_from.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from posting_kernel.db.base import TrackedBase, UUIDString


class AccountMappingModel(TrackedBase):
    """One version of "which accounts absorb which entry type" for a tenant."""

    __tablename__ = "account_mappings"

    __table_args__ = (
        UniqueConstraint(
            "tenant_id",
            "rule_family",
            "version",
            "effective_from",
            name="uq_account_mapping_version",
        ),
        CheckConstraint(
            "effective_to IS NULL OR effective_to >= effective_from",
            name="ck_account_mapping_date_range",
        ),
        Index(
            "idx_account_mapping_lookup",
            "tenant_id",
            "rule_family",
            "effective_from",
        ),
    )

    tenant_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    rule_family: Mapped[str] = mapped_column(
        String(50),
        default="DAILY_BOOK_ENTRY",
        nullable=False,
    )

    version: Mapped[str] = mapped_column(String(50), nullable=False)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)

    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    expense_debit_account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    expense_credit_account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    income_debit_account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    income_credit_account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<AccountMapping {self.rule_family} {self.version} "
            f"{self.effective_from}..{self.effective_to or ''}>"
        )
