"""
Kernel Invariants Contract.

These invariants are structural law for every resolution the engine returns.
No rule family, mapping configuration, or caller option may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across MappingResolver, SnapshotBuilder,
PostingPlanGenerator and the value objects in domain/dtos.py.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    DOUBLE_ENTRY_BALANCE = "double_entry_balance"
    """Planned debits equal planned credits, exactly. Checked by
    PostingPlanGenerator before a plan is returned."""

    CURRENCY_CONSISTENCY = "currency_consistency"
    """Every allocation row and ledger line of one result carries the
    event's currency. Amounts are never converted."""

    DETERMINISM = "determinism"
    """Identical inputs yield byte-identical snapshots and hashes. Enforced
    by the ordered canonical serialization in utils/hashing.py."""

    CODE_SNAPSHOTTING = "code_snapshotting"
    """Snapshots reference accounts by code, never by internal id, so hashes
    survive identifier churn."""

    TENANT_SCOPING = "tenant_scoping"
    """Every lookup is keyed by an explicit (tenant_id, entity_id) pair. The
    kernel never reads ambient request context."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = ("posting_config",)
