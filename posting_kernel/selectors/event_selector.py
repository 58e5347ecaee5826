"""
Module: posting_kernel.selectors.event_selector
Responsibility: Database-backed EventSource over daily_book_entries.
"""

from sqlalchemy import select

from posting_kernel.domain.dtos import BusinessEventView
from posting_kernel.models.daily_book_entry import DailyBookEntry
from posting_kernel.selectors.base import BaseSelector


class EventSelector(BaseSelector[DailyBookEntry]):
    """Reads business events by (tenant_id, event_id)."""

    def get_event(self, tenant_id: str, event_id: str) -> BusinessEventView | None:
        row = self.session.execute(
            select(DailyBookEntry).where(
                DailyBookEntry.id == str(event_id),
                DailyBookEntry.tenant_id == str(tenant_id),
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return self._to_dto(row)

    @staticmethod
    def _to_dto(row: DailyBookEntry) -> BusinessEventView:
        return BusinessEventView(
            id=str(row.id),
            tenant_id=str(row.tenant_id),
            type=row.type,
            project_ref=str(row.project_id) if row.project_id is not None else None,
            gross_amount=row.gross_amount,
            currency_code=row.currency_code,
        )
