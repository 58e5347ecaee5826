"""
RuleResolutionService -- single entry point for resolving a posting.

Responsibility:
    Fetches the inputs of one resolution from its collaborators and runs the
    pure pipeline over them, returning one immutable RuleResolutionResult.

Architecture position:
    Kernel > Services -- imperative shell over the pure domain. Owns no
    transaction and writes nothing; the ledger subsystem persists the plan.

Resolution flow:
    resolve(tenant_id, event_id, posting_date, rule_family)
      1. Normalize the posting date (YYYY-MM-DD)
      2. Fetch the event by (tenant_id, event_id)
      3. Fetch candidate mappings by (tenant_id, rule_family) and resolve
      4. Look up the four mapped accounts by (tenant_id, account_id)
      5. Build the canonical snapshot and rule hash
      6. Generate allocation rows and balanced ledger lines
      7. Assemble RuleResolutionResult

Invariants enforced:
    - Determinism: the result is a pure function of the fetched inputs, so
      retrying with identical inputs yields an identical result
    - Tenant scoping: every collaborator call carries tenant_id explicitly

Failure modes:
    - InvalidPostingDateError, EventNotFoundError,
      MappingConfigurationNotFoundError, AmbiguousMappingConfigurationError,
      AccountNotFoundError, RuleFamilyNotFoundError,
      UnsupportedEventTypeError, InvalidEventAmountError,
      BalanceInvariantViolationError. None are retried here.

Audit relevance:
    Each call logs rule_resolution_started and rule_resolution_completed
    (version, hash, totals) or rule_resolution_failed with the error code,
    under a correlation id bound to the log context.
"""

from __future__ import annotations

import time
from datetime import date
from uuid import uuid4

from posting_kernel.domain.dtos import (
    DAILY_BOOK_ENTRY,
    BusinessEventView,
    MappingConfiguration,
    ResolvedAccounts,
    RuleResolutionResult,
)
from posting_kernel.domain.mapping_resolver import MappingResolver, normalize_posting_date
from posting_kernel.domain.posting_plan import PostingPlanGenerator
from posting_kernel.domain.rule_family import RuleFamilyRegistry
from posting_kernel.domain.snapshot_builder import SnapshotBuilder
from posting_kernel.exceptions import AccountNotFoundError, EventNotFoundError
from posting_kernel.logging_config import LogContext, get_logger
from posting_kernel.services.collaborators import (
    AccountDirectory,
    EventSource,
    MappingConfigurationSource,
)

logger = get_logger("services.rule_resolution")


class RuleResolutionService:
    """
    Resolves what posting a business event would produce, right now.

    Contract:
        Stateless between calls. Collaborators are injected; the default
        domain components are used unless replaced.

    Non-goals:
        - Does NOT persist, lock or post anything
        - Does NOT authorize the caller or check module enablement
        - Does NOT retry failed lookups
    """

    def __init__(
        self,
        events: EventSource,
        mappings: MappingConfigurationSource,
        accounts: AccountDirectory,
        families: RuleFamilyRegistry | None = None,
        resolver: MappingResolver | None = None,
        snapshot_builder: SnapshotBuilder | None = None,
        plan_generator: PostingPlanGenerator | None = None,
    ):
        self._events = events
        self._mappings = mappings
        self._accounts = accounts
        self._families = families or RuleFamilyRegistry.default()
        self._resolver = resolver or MappingResolver()
        self._snapshot_builder = snapshot_builder or SnapshotBuilder()
        self._plan_generator = plan_generator or PostingPlanGenerator(self._families)

    def resolve(
        self,
        tenant_id: str,
        event_id: str,
        posting_date: date | str,
        rule_family: str = DAILY_BOOK_ENTRY,
        correlation_id: str | None = None,
    ) -> RuleResolutionResult:
        """
        Resolve rules for an event at posting time.

        Args:
            tenant_id: Tenant owning the event and its configuration.
            event_id: Business event identifier.
            posting_date: Posting date, ``YYYY-MM-DD`` or a ``date``.
            rule_family: Rule family whose mappings apply.
            correlation_id: Log correlation id; generated when omitted.

        Returns:
            The immutable RuleResolutionResult.
        """
        with LogContext.bind(
            correlation_id=correlation_id or str(uuid4()),
            tenant_id=str(tenant_id),
            event_id=str(event_id),
            rule_family=rule_family,
        ):
            logger.info(
                "rule_resolution_started",
                extra={"posting_date": str(posting_date)},
            )
            t0 = time.monotonic()

            try:
                result = self._do_resolve(
                    str(tenant_id), str(event_id), posting_date, rule_family
                )
            except Exception as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.error(
                    "rule_resolution_failed",
                    extra={
                        "error_code": getattr(exc, "code", type(exc).__name__),
                        "duration_ms": duration_ms,
                    },
                    exc_info=True,
                )
                raise

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            with LogContext.bind(rule_hash=result.rule_hash):
                logger.info(
                    "rule_resolution_completed",
                    extra={
                        "rule_version": str(result.rule_version),
                        "total_debits": str(result.total_debits),
                        "total_credits": str(result.total_credits),
                        "line_count": len(result.ledger_entries),
                        "duration_ms": duration_ms,
                    },
                )
            return result

    def resolve_daily_book_entry(
        self,
        tenant_id: str,
        daily_book_entry_id: str,
        posting_date: date | str,
    ) -> RuleResolutionResult:
        """Resolve a daily book entry (the built-in rule family)."""
        return self.resolve(tenant_id, daily_book_entry_id, posting_date, DAILY_BOOK_ENTRY)

    def _do_resolve(
        self,
        tenant_id: str,
        event_id: str,
        posting_date: date | str,
        rule_family: str,
    ) -> RuleResolutionResult:
        normalized_date = normalize_posting_date(posting_date)
        # Unknown families fail before any lookup
        self._families.get(rule_family)

        event = self._load_event(tenant_id, event_id)

        candidates = self._mappings.list_candidates(tenant_id, rule_family)
        mapping = self._resolver.resolve(
            tenant_id, normalized_date, candidates, rule_family
        )
        accounts = self._load_accounts(tenant_id, mapping)

        snapshot, rule_hash = self._snapshot_builder.build(
            event, normalized_date, mapping, accounts
        )
        allocation_rows, ledger_entries = self._plan_generator.generate(
            event, mapping, accounts
        )

        return RuleResolutionResult.from_snapshot_pairs(
            rule_version=mapping.version,
            rule_hash=rule_hash,
            snapshot=snapshot,
            allocation_rows=allocation_rows,
            ledger_entries=ledger_entries,
        )

    def _load_event(self, tenant_id: str, event_id: str) -> BusinessEventView:
        event = self._events.get_event(tenant_id, event_id)
        # Guard against sources that ignore the tenant key
        if event is None or event.tenant_id != tenant_id:
            raise EventNotFoundError(tenant_id, event_id)
        return event

    def _load_accounts(
        self, tenant_id: str, mapping: MappingConfiguration
    ) -> ResolvedAccounts:
        resolved = {}
        for role, account_id in mapping.account_ids():
            account = self._accounts.get_account(tenant_id, account_id)
            if account is None:
                raise AccountNotFoundError(tenant_id, account_id, role.value)
            resolved[role.value] = account
        return ResolvedAccounts(**resolved)
