"""ORM models backing the kernel's collaborators."""

from posting_kernel.models.account import Account, AccountType
from posting_kernel.models.account_mapping import AccountMappingModel
from posting_kernel.models.daily_book_entry import DailyBookEntry, EntryStatus

__all__ = [
    "Account",
    "AccountMappingModel",
    "AccountType",
    "DailyBookEntry",
    "EntryStatus",
]
