"""
RuleFamily -- Event families the engine can resolve and plan for.

A rule family names the ``source_type`` written into snapshots and the cost
types its allocation rows carry. Daily book entries are the built-in family;
further families (land lease accruals, machinery charges, ...) are supplied
through configuration without code changes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from posting_kernel.domain.dtos import DAILY_BOOK_ENTRY, AccountRole, EventType
from posting_kernel.exceptions import RuleFamilyNotFoundError
from posting_kernel.logging_config import get_logger

logger = get_logger("domain.rule_family")


@dataclass(frozen=True)
class RuleFamily:
    """Snapshot source type and cost-type tags for one event family."""

    name: str
    expense_cost_type: str
    income_cost_type: str
    module: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Rule family name is required")
        if not self.expense_cost_type or not self.income_cost_type:
            raise ValueError(f"Rule family {self.name} needs both cost types")

    def cost_type_for(self, event_type: EventType) -> str:
        if event_type is EventType.EXPENSE:
            return self.expense_cost_type
        return self.income_cost_type

    @staticmethod
    def roles_for(event_type: EventType) -> tuple[AccountRole, AccountRole]:
        """(debit role, credit role) used for an event type."""
        if event_type is EventType.EXPENSE:
            return AccountRole.EXPENSE_DEBIT, AccountRole.EXPENSE_CREDIT
        return AccountRole.INCOME_DEBIT, AccountRole.INCOME_CREDIT


DAILY_BOOK_FAMILY = RuleFamily(
    name=DAILY_BOOK_ENTRY,
    expense_cost_type="DAILY_BOOK_EXPENSE",
    income_cost_type="DAILY_BOOK_INCOME",
    module="projects_crop_cycles",
)


class RuleFamilyRegistry:
    """
    Name -> RuleFamily lookup.

    Built once at startup and only read afterwards, so concurrent
    resolutions can share one instance.
    """

    def __init__(self, families: Iterable[RuleFamily] = ()):
        self._families: dict[str, RuleFamily] = {}
        for family in families:
            self.register(family)

    @classmethod
    def default(cls) -> RuleFamilyRegistry:
        """Registry holding only the daily book entry family."""
        return cls([DAILY_BOOK_FAMILY])

    def register(self, family: RuleFamily) -> None:
        if family.name in self._families:
            raise ValueError(f"Rule family already registered: {family.name}")
        self._families[family.name] = family
        logger.debug(
            "rule_family_registered",
            extra={"rule_family": family.name, "family_module": family.module},
        )

    def get(self, name: str) -> RuleFamily:
        try:
            return self._families[name]
        except KeyError:
            raise RuleFamilyNotFoundError(name) from None

    def names(self) -> tuple[str, ...]:
        return tuple(self._families)

    def __contains__(self, name: object) -> bool:
        return name in self._families

    def __len__(self) -> int:
        return len(self._families)
