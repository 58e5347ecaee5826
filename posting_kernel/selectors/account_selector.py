"""
Module: posting_kernel.selectors.account_selector
Responsibility: Database-backed AccountDirectory over accounts.

Inactive accounts still resolve: a mapping that references one is a
configuration problem for the tenant, not a reason to hide its code.
"""

from sqlalchemy import select

from posting_kernel.domain.dtos import AccountRef
from posting_kernel.models.account import Account
from posting_kernel.selectors.base import BaseSelector


class AccountSelector(BaseSelector[Account]):
    """Resolves (tenant_id, account_id) to an AccountRef."""

    def get_account(self, tenant_id: str, account_id: str) -> AccountRef | None:
        row = self.session.execute(
            select(Account).where(
                Account.id == str(account_id),
                Account.tenant_id == str(tenant_id),
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return AccountRef(id=str(row.id), code=row.code)
