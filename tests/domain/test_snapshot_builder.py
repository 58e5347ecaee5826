"""
Tests for SnapshotBuilder and the canonical snapshot serialization.

The rule hash is an audit and idempotency key, so these tests pin the exact
bytes that get hashed, not just their stability.
"""

import hashlib
from datetime import date

import pytest

from posting_kernel.domain.dtos import AccountRef, ResolvedAccounts
from posting_kernel.domain.snapshot_builder import SnapshotBuilder
from posting_kernel.utils.hashing import canonical_snapshot_json, hash_snapshot
from tests.conftest import SCENARIO_HASH, SCENARIO_JSON, make_event, make_mapping


@pytest.fixture
def builder() -> SnapshotBuilder:
    return SnapshotBuilder()


class TestSnapshotShape:
    """Keys appear in the fixed order, at every level."""

    def test_top_level_key_order(self, builder, expense_event, mapping, accounts):
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)

        assert [key for key, _ in snapshot] == [
            "source_type",
            "source_id",
            "posting_date",
            "mapping",
        ]

    def test_mapping_section_key_order(self, builder, expense_event, mapping, accounts):
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        mapping_section = dict(snapshot)["mapping"]

        assert [key for key, _ in mapping_section] == [
            "version",
            "effective_from",
            "effective_to",
            "expense_debit_account_code",
            "expense_credit_account_code",
            "income_debit_account_code",
            "income_credit_account_code",
        ]

    def test_accounts_snapshotted_by_code(self, builder, expense_event, mapping, accounts):
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        serialized = canonical_snapshot_json(snapshot)

        assert "EXP_CLEAR" in serialized
        assert "acc-exp-clear" not in serialized

    def test_source_type_is_rule_family(self, builder, expense_event, accounts):
        lease_mapping = make_mapping(rule_family="LAND_LEASE_ACCRUAL")
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), lease_mapping, accounts)

        assert dict(snapshot)["source_type"] == "LAND_LEASE_ACCRUAL"


class TestCanonicalSerialization:
    """Exact bytes and exact hash of the scenario snapshot."""

    def test_scenario_json_bytes(self, builder, expense_event, mapping, accounts):
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        assert canonical_snapshot_json(snapshot) == SCENARIO_JSON

    def test_scenario_hash(self, builder, expense_event, mapping, accounts):
        _, rule_hash = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)

        assert rule_hash == SCENARIO_HASH
        assert rule_hash == hashlib.sha256(SCENARIO_JSON.encode("utf-8")).hexdigest()

    def test_closed_range_serializes_date(self, builder, expense_event, accounts):
        closed = make_mapping(effective_to="2024-12-31")
        snapshot, _ = builder.build(expense_event, date(2024, 7, 1), closed, accounts)

        assert '"effective_to":"2024-12-31"' in canonical_snapshot_json(snapshot)

    def test_slashes_and_non_ascii_not_escaped(self):
        pairs = (("source_id", "2024/07/ÉTÉ-€"), ("note", None))

        assert canonical_snapshot_json(pairs) == '{"source_id":"2024/07/ÉTÉ-€","note":null}'

    def test_keys_not_sorted(self):
        pairs = (("b", 1), ("a", 2))
        assert canonical_snapshot_json(pairs) == '{"b":1,"a":2}'

    def test_hash_is_lowercase_hex(self):
        rule_hash = hash_snapshot((("a", "b"),))
        assert len(rule_hash) == 64
        assert rule_hash == rule_hash.lower()
        int(rule_hash, 16)


class TestHashStability:
    """Same logical content, same hash."""

    def test_repeated_builds_identical(self, builder, expense_event, mapping, accounts):
        first = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        second = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        assert first == second

    def test_hash_survives_account_id_churn(self, builder, expense_event, mapping, accounts):
        _, original_hash = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)

        rebuilt_mapping = make_mapping(
            expense_debit_account_id="new-1",
            expense_credit_account_id="new-2",
            income_debit_account_id="new-3",
            income_credit_account_id="new-4",
        )
        rebuilt_accounts = ResolvedAccounts(
            expense_debit=AccountRef("new-1", "EXP_CLEAR"),
            expense_credit=AccountRef("new-2", "CASH"),
            income_debit=AccountRef("new-3", "BANK"),
            income_credit=AccountRef("new-4", "PROJECT_INCOME"),
        )
        _, rebuilt_hash = builder.build(
            expense_event, date(2024, 7, 1), rebuilt_mapping, rebuilt_accounts
        )

        assert rebuilt_hash == original_hash

    def test_hash_ignores_event_amount(self, builder, mapping, accounts):
        _, a = builder.build(make_event(gross_amount="1.00"), date(2024, 7, 1), mapping, accounts)
        _, b = builder.build(make_event(gross_amount="999.99"), date(2024, 7, 1), mapping, accounts)
        assert a == b

    @pytest.mark.parametrize(
        "change",
        [
            {"version": "v2"},
            {"effective_from": "2024-01-02"},
            {"effective_to": "2030-01-01"},
        ],
    )
    def test_hash_changes_with_mapping_fields(self, builder, expense_event, accounts, change):
        _, base = builder.build(expense_event, date(2024, 7, 1), make_mapping(), accounts)
        _, changed = builder.build(
            expense_event, date(2024, 7, 1), make_mapping(**change), accounts
        )
        assert base != changed

    def test_hash_changes_with_posting_date(self, builder, expense_event, mapping, accounts):
        _, a = builder.build(expense_event, date(2024, 7, 1), mapping, accounts)
        _, b = builder.build(expense_event, date(2024, 7, 2), mapping, accounts)
        assert a != b


class TestAccountConsistency:
    def test_rejects_accounts_from_another_mapping(self, builder, expense_event, accounts):
        other = make_mapping(expense_debit_account_id="acc-something-else")

        with pytest.raises(ValueError):
            builder.build(expense_event, date(2024, 7, 1), other, accounts)
