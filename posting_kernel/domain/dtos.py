"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow through rule resolution:
    BusinessEventView and MappingConfiguration (inputs from collaborators),
    AccountRef / ResolvedAccounts (account directory answers), AllocationRow
    and LedgerLine (plan output) and RuleResolutionResult (the one value a
    resolution call returns).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies. Selectors convert ORM rows into these DTOs at
    the persistence boundary; domain logic never sees an ORM entity.

Invariants enforced:
    - Amounts are Decimal (floats are coerced through str(), never used)
    - Currency codes have the ISO 4217 alphabetic shape and are upper-cased
    - LedgerLine has exactly one non-zero side and no negative amounts
    - MappingConfiguration never has effective_to before effective_from
    - RuleResolutionResult.rule_snapshot is deep-frozen and keeps key order

Failure modes:
    - InvalidEventAmountError when an event amount is not a number
    - InvalidCurrencyError when a currency code is not three letters
    - ValueError on malformed mapping dates or ledger lines

Data flow:
    BusinessEventView + MappingConfiguration + ResolvedAccounts
        -> (snapshot, rule_hash) + (allocation_rows, ledger_entries)
        -> RuleResolutionResult
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from posting_kernel.domain.currency import normalize_currency_code
from posting_kernel.domain.values import to_decimal
from posting_kernel.exceptions import InvalidEventAmountError

DAILY_BOOK_ENTRY = "DAILY_BOOK_ENTRY"

# Ordered (key, value) pairs; nested sections are themselves SnapshotPairs.
SnapshotPairs = tuple[tuple[str, Any], ...]


class EventType(str, Enum):
    """Business event types the posting plan generator understands."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class AccountRole(str, Enum):
    """The four account slots of a mapping configuration."""

    EXPENSE_DEBIT = "expense_debit"
    EXPENSE_CREDIT = "expense_credit"
    INCOME_DEBIT = "income_debit"
    INCOME_CREDIT = "income_credit"


def parse_calendar_date(value: date | str) -> date:
    """Coerce a date-like value to a calendar date (time of day dropped)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def _freeze(pairs: SnapshotPairs) -> MappingProxyType:
    frozen: dict[str, Any] = {}
    for key, value in pairs:
        if isinstance(value, tuple) and value and isinstance(value[0], tuple):
            frozen[key] = _freeze(value)
        else:
            frozen[key] = value
    return MappingProxyType(frozen)


def _thaw(mapping: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: _thaw(value) if isinstance(value, Mapping) else value
        for key, value in mapping.items()
    }


@dataclass(frozen=True)
class BusinessEventView:
    """
    Read-only view of a business event awaiting posting.

    ``type`` is kept exactly as the event store supplied it; an unknown type
    is rejected by the posting plan generator, not here, so the failure
    surfaces as UnsupportedEventTypeError with no partial result.
    """

    id: str
    tenant_id: str
    type: EventType | str
    project_ref: str | None
    gross_amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "tenant_id", str(self.tenant_id))
        if self.project_ref is not None:
            object.__setattr__(self, "project_ref", str(self.project_ref))
        try:
            amount = to_decimal(self.gross_amount)
        except ValueError as e:
            raise InvalidEventAmountError(
                self.id, repr(self.gross_amount), "not a number"
            ) from e
        object.__setattr__(self, "gross_amount", amount)
        object.__setattr__(
            self, "currency_code", normalize_currency_code(self.currency_code)
        )

    @property
    def type_value(self) -> str:
        """The raw event type string, whether given as enum or str."""
        if isinstance(self.type, Enum):
            return str(self.type.value)
        return str(self.type)


@dataclass(frozen=True)
class MappingConfiguration:
    """
    One effective-dated version of a tenant's account mapping.

    Contract:
        Append-only: created by tenant configuration management and never
        mutated afterwards. Effective from ``effective_from`` to
        ``effective_to`` inclusive; ``effective_to=None`` is open-ended.

    Non-goals:
        - Does NOT guarantee non-overlap with sibling configurations. The
          resolver applies the tie-break.
    """

    tenant_id: str
    version: str | int
    effective_from: date
    effective_to: date | None
    expense_debit_account_id: str
    expense_credit_account_id: str
    income_debit_account_id: str
    income_credit_account_id: str
    rule_family: str = DAILY_BOOK_ENTRY
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenant_id", str(self.tenant_id))
        object.__setattr__(self, "effective_from", parse_calendar_date(self.effective_from))
        if self.effective_to is not None:
            object.__setattr__(self, "effective_to", parse_calendar_date(self.effective_to))
            if self.effective_to < self.effective_from:
                raise ValueError(
                    f"Mapping {self.version}: effective_to {self.effective_to} "
                    f"is before effective_from {self.effective_from}"
                )
        for role in AccountRole:
            field_name = f"{role.value}_account_id"
            object.__setattr__(self, field_name, str(getattr(self, field_name)))
        if self.id is not None:
            object.__setattr__(self, "id", str(self.id))

    def is_effective_on(self, posting_date: date) -> bool:
        """True iff posting_date falls inside the inclusive effective range."""
        if self.effective_from > posting_date:
            return False
        return self.effective_to is None or self.effective_to >= posting_date

    def account_id_for(self, role: AccountRole) -> str:
        return getattr(self, f"{role.value}_account_id")

    def account_ids(self) -> tuple[tuple[AccountRole, str], ...]:
        """(role, account_id) for all four slots, in snapshot order."""
        return tuple((role, self.account_id_for(role)) for role in AccountRole)


@dataclass(frozen=True)
class AccountRef:
    """An account as the directory resolves it: internal id and stable code."""

    id: str
    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))


@dataclass(frozen=True)
class ResolvedAccounts:
    """The four accounts a mapping configuration points at."""

    expense_debit: AccountRef
    expense_credit: AccountRef
    income_debit: AccountRef
    income_credit: AccountRef

    def for_role(self, role: AccountRole) -> AccountRef:
        return getattr(self, role.value)

    def belongs_to(self, mapping: MappingConfiguration) -> bool:
        """True iff every slot carries the id the mapping references."""
        return all(
            self.for_role(role).id == account_id
            for role, account_id in mapping.account_ids()
        )


@dataclass(frozen=True)
class AllocationRow:
    """Attribution of an amount to a project / cost-type bucket."""

    project_ref: str | None
    cost_type: str
    amount: Decimal
    currency_code: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_ref": self.project_ref,
            "cost_type": self.cost_type,
            "amount": str(self.amount),
            "currency_code": self.currency_code,
        }


@dataclass(frozen=True)
class LedgerLine:
    """
    One planned ledger line.

    Guarantees:
        - debit and credit are non-negative Decimals
        - exactly one of debit / credit is non-zero
    """

    account_id: str
    account_code: str
    debit: Decimal
    credit: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        debit = to_decimal(self.debit)
        credit = to_decimal(self.credit)
        if debit < 0 or credit < 0:
            raise ValueError(
                f"Ledger line on {self.account_code} has a negative amount: "
                f"debit={debit}, credit={credit}"
            )
        if (debit != 0) == (credit != 0):
            raise ValueError(
                f"Ledger line on {self.account_code} must have exactly one "
                f"non-zero side: debit={debit}, credit={credit}"
            )
        object.__setattr__(self, "debit", debit)
        object.__setattr__(self, "credit", credit)

    @property
    def is_debit(self) -> bool:
        return self.debit != 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "account_code": self.account_code,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "currency_code": self.currency_code,
        }


@dataclass(frozen=True)
class RuleResolutionResult:
    """
    Immutable outcome of one resolution call.

    Contract:
        Created once per call and owned by the caller. ``rule_hash`` is the
        SHA-256 of the canonical serialization of ``rule_snapshot`` and is
        safe to use as an idempotency / audit key.
    """

    rule_version: str | int
    rule_hash: str
    rule_snapshot: Mapping[str, Any]
    allocation_rows: tuple[AllocationRow, ...]
    ledger_entries: tuple[LedgerLine, ...]

    def __hash__(self) -> int:
        # rule_snapshot is a mapping proxy; rule_hash already stands for it
        return hash(
            (self.rule_version, self.rule_hash, self.allocation_rows, self.ledger_entries)
        )

    @classmethod
    def from_snapshot_pairs(
        cls,
        rule_version: str | int,
        rule_hash: str,
        snapshot: SnapshotPairs,
        allocation_rows: tuple[AllocationRow, ...],
        ledger_entries: tuple[LedgerLine, ...],
    ) -> RuleResolutionResult:
        return cls(
            rule_version=rule_version,
            rule_hash=rule_hash,
            rule_snapshot=_freeze(snapshot),
            allocation_rows=tuple(allocation_rows),
            ledger_entries=tuple(ledger_entries),
        )

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.ledger_entries), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.ledger_entries), Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready structure for an outer layer (snapshot key order kept)."""
        return {
            "rule_version": self.rule_version,
            "rule_hash": self.rule_hash,
            "rule_snapshot": _thaw(self.rule_snapshot),
            "allocation_rows": [row.to_dict() for row in self.allocation_rows],
            "ledger_entries": [line.to_dict() for line in self.ledger_entries],
        }
