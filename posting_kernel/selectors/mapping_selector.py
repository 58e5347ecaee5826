"""
Module: posting_kernel.selectors.mapping_selector
Responsibility: Database-backed MappingConfigurationSource over
    account_mappings.

Every configuration of the tenant and rule family is returned; choosing the
one in effect is the MappingResolver's job, so the selection rule lives in
exactly one place.
"""

from collections.abc import Sequence

from sqlalchemy import select

from posting_kernel.domain.dtos import DAILY_BOOK_ENTRY, MappingConfiguration
from posting_kernel.models.account_mapping import AccountMappingModel
from posting_kernel.selectors.base import BaseSelector


class MappingConfigurationSelector(BaseSelector[AccountMappingModel]):
    """Reads candidate mapping configurations by (tenant_id, rule_family)."""

    def list_candidates(
        self, tenant_id: str, rule_family: str = DAILY_BOOK_ENTRY
    ) -> Sequence[MappingConfiguration]:
        rows = self.session.execute(
            select(AccountMappingModel)
            .where(
                AccountMappingModel.tenant_id == str(tenant_id),
                AccountMappingModel.rule_family == rule_family,
            )
            .order_by(AccountMappingModel.effective_from, AccountMappingModel.version)
        ).scalars()
        return tuple(self._to_dto(row) for row in rows)

    @staticmethod
    def _to_dto(row: AccountMappingModel) -> MappingConfiguration:
        return MappingConfiguration(
            id=str(row.id),
            tenant_id=str(row.tenant_id),
            rule_family=row.rule_family,
            version=row.version,
            effective_from=row.effective_from,
            effective_to=row.effective_to,
            expense_debit_account_id=str(row.expense_debit_account_id),
            expense_credit_account_id=str(row.expense_credit_account_id),
            income_debit_account_id=str(row.income_debit_account_id),
            income_credit_account_id=str(row.income_credit_account_id),
        )
