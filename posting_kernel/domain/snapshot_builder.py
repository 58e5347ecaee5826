"""
SnapshotBuilder -- Canonical, content-hashed record of a resolution decision.

Responsibility:
    Freezes which mapping configuration applied to which event on which
    posting date into an ordered structure, and hashes it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Snapshot layout (order is part of the hash contract):
    source_type
    source_id
    posting_date                  YYYY-MM-DD
    mapping:
        version
        effective_from            YYYY-MM-DD
        effective_to              YYYY-MM-DD or null
        expense_debit_account_code
        expense_credit_account_code
        income_debit_account_code
        income_credit_account_code

Invariants enforced:
    - Determinism: identical logical content gives an identical hash
    - Accounts appear by code only, so the hash survives id regeneration

Failure modes:
    - ValueError if the resolved accounts were not looked up for this mapping
"""

from __future__ import annotations

from datetime import date

from posting_kernel.domain.dtos import (
    AccountRole,
    BusinessEventView,
    MappingConfiguration,
    ResolvedAccounts,
    SnapshotPairs,
)
from posting_kernel.utils.hashing import hash_snapshot


class SnapshotBuilder:
    """Builds the ordered rule snapshot and its SHA-256 rule hash."""

    def build(
        self,
        event: BusinessEventView,
        posting_date: date,
        mapping: MappingConfiguration,
        accounts: ResolvedAccounts,
    ) -> tuple[SnapshotPairs, str]:
        """
        Build the snapshot for one resolution.

        The ``source_type`` is the mapping's rule family.

        Returns:
            (snapshot pairs, lowercase hex SHA-256 rule hash)
        """
        if not accounts.belongs_to(mapping):
            raise ValueError(
                f"Resolved accounts do not match mapping {mapping.version}"
            )

        mapping_section: SnapshotPairs = (
            ("version", mapping.version),
            ("effective_from", mapping.effective_from.isoformat()),
            (
                "effective_to",
                mapping.effective_to.isoformat() if mapping.effective_to else None,
            ),
        ) + tuple(
            (f"{role.value}_account_code", accounts.for_role(role).code)
            for role in AccountRole
        )

        snapshot: SnapshotPairs = (
            ("source_type", mapping.rule_family),
            ("source_id", event.id),
            ("posting_date", posting_date.isoformat()),
            ("mapping", mapping_section),
        )
        return snapshot, hash_snapshot(snapshot)
