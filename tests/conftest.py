"""
Pytest fixtures for the posting kernel test suite.

Provides:
- Structured logging setup and log capture
- The canonical single-tenant scenario (tenant T1, event E1)
- SQLite database sessions for selector tests

Environment Variables:
- DATABASE_URL: database URL for selector tests.  Defaults to an in-memory
  SQLite database, so no server is required.
"""

import json
import logging
import os
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from posting_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    init_engine_from_url,
    reset_engine,
)
from posting_kernel.domain.dtos import (
    AccountRef,
    BusinessEventView,
    EventType,
    MappingConfiguration,
    ResolvedAccounts,
)
from posting_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from posting_kernel.services.collaborators import (
    InMemoryAccountDirectory,
    InMemoryEventSource,
    InMemoryMappingConfigurationSource,
)
from posting_kernel.services.rule_resolution_service import RuleResolutionService

TENANT_ID = "T1"
EVENT_ID = "E1"

DEFAULT_DATABASE_URL = "sqlite:///:memory:"

# Canonical serialization and rule hash of E1 resolved on 2024-07-01
SCENARIO_JSON = (
    '{"source_type":"DAILY_BOOK_ENTRY","source_id":"E1","posting_date":"2024-07-01",'
    '"mapping":{"version":"v1","effective_from":"2024-01-01","effective_to":null,'
    '"expense_debit_account_code":"EXP_CLEAR","expense_credit_account_code":"CASH",'
    '"income_debit_account_code":"BANK","income_credit_account_code":"PROJECT_INCOME"}}'
)
SCENARIO_HASH = "db9327fd3f35606b592f37b23f95fe1ea157f03d61047f85c62dd4235b052a32"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture posting_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, resolution_service):
            resolution_service.resolve("T1", "E1", "2024-07-01")
            logs = captured_logs()
            assert any(r["message"] == "rule_resolution_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("posting_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Scenario fixtures
# =============================================================================


@pytest.fixture
def accounts() -> ResolvedAccounts:
    return ResolvedAccounts(
        expense_debit=AccountRef("acc-exp-clear", "EXP_CLEAR"),
        expense_credit=AccountRef("acc-cash", "CASH"),
        income_debit=AccountRef("acc-bank", "BANK"),
        income_credit=AccountRef("acc-income", "PROJECT_INCOME"),
    )


def make_mapping(
    version="v1",
    effective_from="2024-01-01",
    effective_to=None,
    tenant_id=TENANT_ID,
    **overrides,
) -> MappingConfiguration:
    """Mapping over the scenario accounts; keyword overrides win."""
    fields = dict(
        tenant_id=tenant_id,
        version=version,
        effective_from=effective_from,
        effective_to=effective_to,
        expense_debit_account_id="acc-exp-clear",
        expense_credit_account_id="acc-cash",
        income_debit_account_id="acc-bank",
        income_credit_account_id="acc-income",
    )
    fields.update(overrides)
    return MappingConfiguration(**fields)


def make_event(
    event_id=EVENT_ID,
    type=EventType.EXPENSE,
    gross_amount="150.00",
    currency_code="GBP",
    project_ref="P1",
    tenant_id=TENANT_ID,
) -> BusinessEventView:
    return BusinessEventView(
        id=event_id,
        tenant_id=tenant_id,
        type=type,
        project_ref=project_ref,
        gross_amount=Decimal(gross_amount),
        currency_code=currency_code,
    )


@pytest.fixture
def mapping() -> MappingConfiguration:
    return make_mapping()


@pytest.fixture
def expense_event() -> BusinessEventView:
    return make_event()


@pytest.fixture
def income_event() -> BusinessEventView:
    return make_event(event_id="E2", type=EventType.INCOME, gross_amount="980.50")


@pytest.fixture
def event_source(expense_event, income_event) -> InMemoryEventSource:
    return InMemoryEventSource([expense_event, income_event])


@pytest.fixture
def mapping_source(mapping) -> InMemoryMappingConfigurationSource:
    return InMemoryMappingConfigurationSource([mapping])


@pytest.fixture
def account_directory(accounts) -> InMemoryAccountDirectory:
    return InMemoryAccountDirectory(
        (TENANT_ID, account)
        for account in (
            accounts.expense_debit,
            accounts.expense_credit,
            accounts.income_debit,
            accounts.income_credit,
        )
    )


@pytest.fixture
def resolution_service(event_source, mapping_source, account_directory) -> RuleResolutionService:
    return RuleResolutionService(
        events=event_source,
        mappings=mapping_source,
        accounts=account_directory,
    )


@pytest.fixture
def posting_date() -> date:
    return date(2024, 7, 1)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session, tables created once."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session bound to an outer transaction that is rolled back after the test."""
    connection = get_engine().connect()
    transaction = connection.begin()
    sess = Session(bind=connection, expire_on_commit=False)
    try:
        yield sess
    finally:
        sess.close()
        transaction.rollback()
        connection.close()
