"""
Tests for the SQLAlchemy-backed collaborators.

Resolves daily book entries end-to-end against the ORM models, using the
selectors as EventSource, MappingConfigurationSource and AccountDirectory.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from posting_kernel.domain.dtos import DAILY_BOOK_ENTRY
from posting_kernel.exceptions import AccountNotFoundError, EventNotFoundError
from posting_kernel.models import Account, AccountMappingModel, AccountType, DailyBookEntry
from posting_kernel.selectors import (
    AccountSelector,
    EventSelector,
    MappingConfigurationSelector,
)
from posting_kernel.services import (
    AccountDirectory,
    EventSource,
    MappingConfigurationSource,
    RuleResolutionService,
)


def _add_accounts(session, tenant_id) -> dict[str, Account]:
    specs = {
        "expense_debit": ("EXP_CLEAR", "Expense clearing", AccountType.EXPENSE),
        "expense_credit": ("CASH", "Cash", AccountType.ASSET),
        "income_debit": ("BANK", "Bank", AccountType.ASSET),
        "income_credit": ("PROJECT_INCOME", "Project income", AccountType.INCOME),
    }
    created = {}
    for role, (code, name, account_type) in specs.items():
        account = Account(
            id=uuid4(),
            tenant_id=tenant_id,
            code=code,
            name=name,
            account_type=account_type.value,
        )
        session.add(account)
        created[role] = account
    session.flush()
    return created


def _add_mapping(session, tenant_id, accounts, version="v1", effective_from=date(2024, 1, 1),
                 effective_to=None, rule_family=DAILY_BOOK_ENTRY) -> AccountMappingModel:
    mapping = AccountMappingModel(
        tenant_id=tenant_id,
        rule_family=rule_family,
        version=version,
        effective_from=effective_from,
        effective_to=effective_to,
        expense_debit_account_id=accounts["expense_debit"].id,
        expense_credit_account_id=accounts["expense_credit"].id,
        income_debit_account_id=accounts["income_debit"].id,
        income_credit_account_id=accounts["income_credit"].id,
    )
    session.add(mapping)
    session.flush()
    return mapping


def _add_entry(session, tenant_id, type="EXPENSE", amount=Decimal("150.00")) -> DailyBookEntry:
    entry = DailyBookEntry(
        tenant_id=tenant_id,
        type=type,
        project_id=uuid4(),
        event_date=date(2024, 7, 1),
        description="Diesel for tractor",
        gross_amount=amount,
        currency_code="GBP",
    )
    session.add(entry)
    session.flush()
    return entry


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def db_accounts(session, tenant_id):
    return _add_accounts(session, tenant_id)


@pytest.fixture
def service(session) -> RuleResolutionService:
    return RuleResolutionService(
        events=EventSelector(session),
        mappings=MappingConfigurationSelector(session),
        accounts=AccountSelector(session),
    )


class TestSelectorsSatisfyProtocols:
    def test_protocols(self, session):
        assert isinstance(EventSelector(session), EventSource)
        assert isinstance(MappingConfigurationSelector(session), MappingConfigurationSource)
        assert isinstance(AccountSelector(session), AccountDirectory)


class TestEventSelector:
    def test_returns_view(self, session, tenant_id):
        entry = _add_entry(session, tenant_id)

        view = EventSelector(session).get_event(str(tenant_id), str(entry.id))

        assert view.id == str(entry.id)
        assert view.tenant_id == str(tenant_id)
        assert view.type == "EXPENSE"
        assert view.project_ref == str(entry.project_id)
        assert view.gross_amount == Decimal("150.00")
        assert view.currency_code == "GBP"

    def test_scoped_by_tenant(self, session, tenant_id):
        entry = _add_entry(session, tenant_id)
        assert EventSelector(session).get_event(str(uuid4()), str(entry.id)) is None

    def test_unknown_id(self, session, tenant_id):
        assert EventSelector(session).get_event(str(tenant_id), str(uuid4())) is None


class TestMappingConfigurationSelector:
    def test_lists_tenant_and_family_rows(self, session, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts, version="v2",
                     effective_from=date(2024, 6, 1))
        _add_mapping(session, tenant_id, db_accounts, version="v1")
        _add_mapping(session, tenant_id, db_accounts, version="lease-1",
                     rule_family="LAND_LEASE_ACCRUAL")
        other_tenant = uuid4()
        _add_mapping(session, other_tenant, _add_accounts(session, other_tenant), version="x1")

        candidates = MappingConfigurationSelector(session).list_candidates(str(tenant_id))

        assert [c.version for c in candidates] == ["v1", "v2"]
        assert all(c.tenant_id == str(tenant_id) for c in candidates)
        assert candidates[0].expense_debit_account_id == str(db_accounts["expense_debit"].id)
        assert candidates[0].effective_from == date(2024, 1, 1)
        assert candidates[0].effective_to is None

    def test_other_family(self, session, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts, version="lease-1",
                     rule_family="LAND_LEASE_ACCRUAL")

        candidates = MappingConfigurationSelector(session).list_candidates(
            str(tenant_id), "LAND_LEASE_ACCRUAL"
        )

        assert [c.rule_family for c in candidates] == ["LAND_LEASE_ACCRUAL"]


class TestAccountSelector:
    def test_resolves_code(self, session, tenant_id, db_accounts):
        cash = db_accounts["expense_credit"]
        ref = AccountSelector(session).get_account(str(tenant_id), str(cash.id))
        assert ref.id == str(cash.id)
        assert ref.code == "CASH"

    def test_scoped_by_tenant(self, session, tenant_id, db_accounts):
        cash = db_accounts["expense_credit"]
        assert AccountSelector(session).get_account(str(uuid4()), str(cash.id)) is None


class TestEndToEnd:
    def test_resolves_expense_entry(self, session, service, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts)
        entry = _add_entry(session, tenant_id)

        result = service.resolve_daily_book_entry(str(tenant_id), str(entry.id), "2024-07-01")

        assert result.rule_version == "v1"
        assert result.rule_snapshot["source_id"] == str(entry.id)
        assert result.allocation_rows[0].project_ref == str(entry.project_id)
        assert [line.account_code for line in result.ledger_entries] == ["EXP_CLEAR", "CASH"]
        assert result.total_debits == result.total_credits == Decimal("150.00")

    def test_latest_start_wins(self, session, service, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts, version="v1")
        _add_mapping(session, tenant_id, db_accounts, version="v2",
                     effective_from=date(2024, 6, 1))
        entry = _add_entry(session, tenant_id)

        result = service.resolve(str(tenant_id), str(entry.id), "2024-07-01")

        assert result.rule_version == "v2"

    def test_hash_survives_account_regeneration(self, session, service, tenant_id, db_accounts):
        mapping = _add_mapping(session, tenant_id, db_accounts)
        entry = _add_entry(session, tenant_id)
        before = service.resolve(str(tenant_id), str(entry.id), "2024-07-01")

        # Rebuild the chart of accounts with fresh ids, same codes
        session.delete(mapping)
        for account in db_accounts.values():
            session.delete(account)
        session.flush()
        _add_mapping(session, tenant_id, _add_accounts(session, tenant_id))

        after = service.resolve(str(tenant_id), str(entry.id), "2024-07-01")

        assert after.ledger_entries[0].account_id != before.ledger_entries[0].account_id
        assert after.rule_hash == before.rule_hash

    def test_unknown_entry(self, service, tenant_id):
        with pytest.raises(EventNotFoundError):
            service.resolve(str(tenant_id), str(uuid4()), "2024-07-01")

    def test_dangling_account_reference(self, session, service, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts)
        entry = _add_entry(session, tenant_id)
        session.delete(db_accounts["income_credit"])
        session.flush()

        with pytest.raises(AccountNotFoundError) as exc_info:
            service.resolve(str(tenant_id), str(entry.id), "2024-07-01")

        assert exc_info.value.role == "income_credit"


class TestOpaqueIdentifiers:
    """Tables hold UUID ids; other keys are answered as not found."""

    def test_non_uuid_keys_match_nothing(self, session, tenant_id, db_accounts):
        _add_mapping(session, tenant_id, db_accounts)
        _add_entry(session, tenant_id)

        assert EventSelector(session).get_event("T1", "E1") is None
        assert EventSelector(session).get_event(str(tenant_id), "E1") is None
        assert AccountSelector(session).get_account(str(tenant_id), "acc-cash") is None
        assert MappingConfigurationSelector(session).list_candidates("T1") == ()

    def test_service_reports_event_not_found(self, service):
        with pytest.raises(EventNotFoundError) as exc_info:
            service.resolve("T1", "E1", "2024-07-01")

        assert exc_info.value.event_id == "E1"
