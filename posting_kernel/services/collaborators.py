"""
Collaborator interfaces the resolution service reads from.

Every lookup takes an explicit (tenant_id, entity_id) key; nothing here
consults ambient request or session state. Implementations may be backed by
a database (see posting_kernel.selectors), a remote API, or memory.

The in-memory implementations below are used by the test suite and by hosts
that already hold the data they want resolved.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from posting_kernel.domain.dtos import (
    DAILY_BOOK_ENTRY,
    AccountRef,
    BusinessEventView,
    MappingConfiguration,
)


@runtime_checkable
class EventSource(Protocol):
    """Supplies business events. Read-only."""

    def get_event(self, tenant_id: str, event_id: str) -> BusinessEventView | None:
        ...


@runtime_checkable
class MappingConfigurationSource(Protocol):
    """Supplies candidate mapping configurations. Read-only."""

    def list_candidates(
        self, tenant_id: str, rule_family: str
    ) -> Sequence[MappingConfiguration]:
        ...


@runtime_checkable
class AccountDirectory(Protocol):
    """Resolves account ids to stable account codes. Read-only."""

    def get_account(self, tenant_id: str, account_id: str) -> AccountRef | None:
        ...


class InMemoryEventSource:
    """EventSource over a fixed collection of events."""

    def __init__(self, events: Iterable[BusinessEventView] = ()):
        self._events: dict[tuple[str, str], BusinessEventView] = {}
        for event in events:
            self.add(event)

    def add(self, event: BusinessEventView) -> None:
        self._events[(event.tenant_id, event.id)] = event

    def get_event(self, tenant_id: str, event_id: str) -> BusinessEventView | None:
        return self._events.get((str(tenant_id), str(event_id)))


class InMemoryMappingConfigurationSource:
    """MappingConfigurationSource over a fixed collection of configurations."""

    def __init__(self, mappings: Iterable[MappingConfiguration] = ()):
        self._mappings: list[MappingConfiguration] = list(mappings)

    def add(self, mapping: MappingConfiguration) -> None:
        self._mappings.append(mapping)

    def list_candidates(
        self, tenant_id: str, rule_family: str = DAILY_BOOK_ENTRY
    ) -> Sequence[MappingConfiguration]:
        return tuple(
            m for m in self._mappings
            if m.tenant_id == str(tenant_id) and m.rule_family == rule_family
        )


class InMemoryAccountDirectory:
    """AccountDirectory over (tenant_id, AccountRef) pairs."""

    def __init__(self, accounts: Iterable[tuple[str, AccountRef]] = ()):
        self._accounts: dict[tuple[str, str], AccountRef] = {}
        for tenant_id, account in accounts:
            self.add(tenant_id, account)

    def add(self, tenant_id: str, account: AccountRef) -> None:
        self._accounts[(str(tenant_id), account.id)] = account

    def get_account(self, tenant_id: str, account_id: str) -> AccountRef | None:
        return self._accounts.get((str(tenant_id), str(account_id)))
