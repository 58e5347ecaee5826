"""
Pure domain layer.

This module contains the resolver, snapshot builder and posting plan
generator, plus the DTOs they exchange, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from posting_kernel.domain.currency import normalize_currency_code
from posting_kernel.domain.dependency_graph import DependencyGraph
from posting_kernel.domain.dtos import (
    DAILY_BOOK_ENTRY,
    AccountRef,
    AccountRole,
    AllocationRow,
    BusinessEventView,
    EventType,
    LedgerLine,
    MappingConfiguration,
    ResolvedAccounts,
    RuleResolutionResult,
    SnapshotPairs,
)
from posting_kernel.domain.mapping_resolver import (
    MappingResolver,
    normalize_posting_date,
    version_sort_key,
)
from posting_kernel.domain.posting_plan import (
    SUPPORTED_EVENT_TYPES,
    PostingPlanGenerator,
    assert_balanced,
    resolve_event_type,
)
from posting_kernel.domain.rule_family import (
    DAILY_BOOK_FAMILY,
    RuleFamily,
    RuleFamilyRegistry,
)
from posting_kernel.domain.snapshot_builder import SnapshotBuilder
from posting_kernel.domain.values import Currency, Money

__all__ = [
    # Value objects
    "Currency",
    "Money",
    "normalize_currency_code",
    # DTOs
    "DAILY_BOOK_ENTRY",
    "AccountRef",
    "AccountRole",
    "AllocationRow",
    "BusinessEventView",
    "EventType",
    "LedgerLine",
    "MappingConfiguration",
    "ResolvedAccounts",
    "RuleResolutionResult",
    "SnapshotPairs",
    # Pipeline
    "MappingResolver",
    "normalize_posting_date",
    "version_sort_key",
    "SnapshotBuilder",
    "SUPPORTED_EVENT_TYPES",
    "PostingPlanGenerator",
    "assert_balanced",
    "resolve_event_type",
    # Rule families and modules
    "DAILY_BOOK_FAMILY",
    "RuleFamily",
    "RuleFamilyRegistry",
    "DependencyGraph",
]
