"""
PostingPlanGenerator -- Allocation rows and balanced ledger lines for an event.

Responsibility:
    Turns a business event and its resolved mapping into the plan the ledger
    subsystem will persist: one cost-allocation row and one debit/credit pair.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Double-entry balance: debits equal credits per currency, exactly.
      The pair is built to balance; the post-condition check still runs
      and a failure aborts the resolution.
    - Currency consistency: every row and line carries the event currency.
    - Decimal arithmetic only.

Failure modes:
    - UnsupportedEventTypeError for types other than EXPENSE / INCOME
    - InvalidEventAmountError for a gross amount that is zero or negative
    - RuleFamilyNotFoundError if the mapping's family is not registered
    - BalanceInvariantViolationError if the post-condition fails (a bug)
"""

from __future__ import annotations

from decimal import Decimal

from posting_kernel.domain.dtos import (
    AllocationRow,
    BusinessEventView,
    EventType,
    LedgerLine,
    MappingConfiguration,
    ResolvedAccounts,
)
from posting_kernel.domain.rule_family import RuleFamilyRegistry
from posting_kernel.domain.values import Money
from posting_kernel.exceptions import (
    BalanceInvariantViolationError,
    InvalidEventAmountError,
    UnsupportedEventTypeError,
)
from posting_kernel.logging_config import get_logger

logger = get_logger("domain.posting_plan")

SUPPORTED_EVENT_TYPES: tuple[str, ...] = tuple(t.value for t in EventType)


def resolve_event_type(event: BusinessEventView) -> EventType:
    """Map the event's raw type onto EventType or reject it."""
    try:
        return EventType(event.type_value)
    except ValueError:
        raise UnsupportedEventTypeError(
            event.id, event.type_value, SUPPORTED_EVENT_TYPES
        ) from None


def assert_balanced(lines: tuple[LedgerLine, ...]) -> None:
    """
    Verify debits equal credits for every currency in ``lines``.

    Raises:
        BalanceInvariantViolationError: If any currency is out of balance.
    """
    for currency in sorted({line.currency_code for line in lines}):
        in_currency = [line for line in lines if line.currency_code == currency]
        debits = Money.total((Money.of(l.debit, currency) for l in in_currency), currency)
        credits = Money.total((Money.of(l.credit, currency) for l in in_currency), currency)
        if debits != credits:
            logger.critical(
                "posting_plan_unbalanced",
                extra={
                    "currency": currency,
                    "debits": str(debits.amount),
                    "credits": str(credits.amount),
                },
            )
            raise BalanceInvariantViolationError(
                str(debits.amount), str(credits.amount), currency
            )


class PostingPlanGenerator:
    """
    Builds allocation rows and ledger lines for supported event types.

    Contract:
        ``generate()`` returns a complete, balanced plan or raises; it never
        returns a partial plan.
    """

    def __init__(self, families: RuleFamilyRegistry | None = None):
        self._families = families or RuleFamilyRegistry.default()

    def generate(
        self,
        event: BusinessEventView,
        mapping: MappingConfiguration,
        accounts: ResolvedAccounts,
    ) -> tuple[tuple[AllocationRow, ...], tuple[LedgerLine, ...]]:
        """
        Generate the posting plan.

        Args:
            event: The business event being posted.
            mapping: The resolved mapping configuration.
            accounts: The mapping's accounts, looked up by the directory.

        Returns:
            (allocation_rows, ledger_entries)
        """
        event_type = resolve_event_type(event)
        family = self._families.get(mapping.rule_family)

        amount = event.gross_amount
        if amount <= Decimal("0"):
            raise InvalidEventAmountError(
                event.id, str(amount), "gross amount must be positive"
            )

        debit_role, credit_role = family.roles_for(event_type)
        debit_account = accounts.for_role(debit_role)
        credit_account = accounts.for_role(credit_role)
        currency = event.currency_code

        allocation_rows = (
            AllocationRow(
                project_ref=event.project_ref,
                cost_type=family.cost_type_for(event_type),
                amount=amount,
                currency_code=currency,
            ),
        )

        ledger_entries = (
            LedgerLine(
                account_id=debit_account.id,
                account_code=debit_account.code,
                debit=amount,
                credit=Decimal("0"),
                currency_code=currency,
            ),
            LedgerLine(
                account_id=credit_account.id,
                account_code=credit_account.code,
                debit=Decimal("0"),
                credit=amount,
                currency_code=currency,
            ),
        )

        assert_balanced(ledger_entries)

        logger.debug(
            "posting_plan_generated",
            extra={
                "event_id": event.id,
                "event_type": event_type.value,
                "rule_family": family.name,
                "amount": str(amount),
                "currency": currency,
                "debit_account": debit_account.code,
                "credit_account": credit_account.code,
            },
        )
        return allocation_rows, ledger_entries
