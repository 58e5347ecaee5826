"""Tests for RuleFamily and RuleFamilyRegistry."""

import pytest

from posting_kernel.domain.dtos import DAILY_BOOK_ENTRY, AccountRole, EventType
from posting_kernel.domain.rule_family import DAILY_BOOK_FAMILY, RuleFamily, RuleFamilyRegistry
from posting_kernel.exceptions import RuleFamilyNotFoundError


class TestRuleFamily:
    def test_daily_book_cost_types(self):
        assert DAILY_BOOK_FAMILY.name == DAILY_BOOK_ENTRY
        assert DAILY_BOOK_FAMILY.cost_type_for(EventType.EXPENSE) == "DAILY_BOOK_EXPENSE"
        assert DAILY_BOOK_FAMILY.cost_type_for(EventType.INCOME) == "DAILY_BOOK_INCOME"

    def test_roles(self):
        assert RuleFamily.roles_for(EventType.EXPENSE) == (
            AccountRole.EXPENSE_DEBIT,
            AccountRole.EXPENSE_CREDIT,
        )
        assert RuleFamily.roles_for(EventType.INCOME) == (
            AccountRole.INCOME_DEBIT,
            AccountRole.INCOME_CREDIT,
        )

    @pytest.mark.parametrize(
        "args",
        [("", "E", "I"), ("F", "", "I"), ("F", "E", "")],
    )
    def test_requires_name_and_cost_types(self, args):
        with pytest.raises(ValueError):
            RuleFamily(*args)


class TestRuleFamilyRegistry:
    def test_default_holds_daily_book(self):
        registry = RuleFamilyRegistry.default()
        assert registry.names() == (DAILY_BOOK_ENTRY,)
        assert registry.get(DAILY_BOOK_ENTRY) is DAILY_BOOK_FAMILY

    def test_register_and_lookup(self):
        lease = RuleFamily("LAND_LEASE_ACCRUAL", "LAND_LEASE_EXPENSE", "LAND_LEASE_INCOME")
        registry = RuleFamilyRegistry([DAILY_BOOK_FAMILY, lease])

        assert len(registry) == 2
        assert "LAND_LEASE_ACCRUAL" in registry
        assert registry.get("LAND_LEASE_ACCRUAL") is lease

    def test_duplicate_rejected(self):
        registry = RuleFamilyRegistry.default()
        with pytest.raises(ValueError):
            registry.register(DAILY_BOOK_FAMILY)

    def test_unknown_family(self):
        with pytest.raises(RuleFamilyNotFoundError) as exc_info:
            RuleFamilyRegistry.default().get("MACHINERY_CHARGE")

        assert exc_info.value.rule_family == "MACHINERY_CHARGE"
        assert exc_info.value.entity == "rule_family"
