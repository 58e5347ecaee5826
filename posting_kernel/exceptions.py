"""
Typed Exception Hierarchy for the Posting Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the rule resolution engine translate failures into user-facing
messages and HTTP statuses the engine knows nothing about. They must be able
to do that without parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        result = service.resolve(tenant_id, event_id, "2024-07-01")
    except MappingConfigurationNotFoundError as e:
        # Actionable message for the tenant administrator
        notify(f"No effective account mapping for {e.posting_date}")
    except NotFoundError as e:
        api_response(code=e.code, entity=e.entity)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PostingKernelError (base)
    |
    +-- NotFoundError
    |   +-- EventNotFoundError
    |   +-- MappingConfigurationNotFoundError
    |   +-- AccountNotFoundError
    |   +-- RuleFamilyNotFoundError
    |
    +-- ResolutionError
    |   +-- UnsupportedEventTypeError
    |   +-- AmbiguousMappingConfigurationError
    |   +-- InvalidPostingDateError
    |   +-- InvalidEventAmountError
    |   +-- InvalidCurrencyError
    |
    +-- InvariantViolationError
    |   +-- BalanceInvariantViolationError
    |
    +-- ConfigurationError
        +-- DependencyCycleError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                            | When Raised
----------------|---------------------------------|---------------------------------------
Not found       | EVENT_NOT_FOUND                 | Event id not found for the tenant
                | MAPPING_CONFIGURATION_NOT_FOUND | No mapping covers the posting date
                | ACCOUNT_NOT_FOUND               | Mapping references a missing account
                | RULE_FAMILY_NOT_FOUND           | Unknown rule family requested
----------------|---------------------------------|---------------------------------------
Resolution      | UNSUPPORTED_EVENT_TYPE          | Event type outside EXPENSE / INCOME
                | AMBIGUOUS_MAPPING_CONFIGURATION | Latest start and version both tie 
                | INVALID_POSTING_DATE            | Posting date is not YYYY-MM-DD
                | INVALID_EVENT_AMOUNT            | Gross amount is not positive
                | INVALID_CURRENCY                | Not an ISO 4217 alphabetic code
----------------|---------------------------------|---------------------------------------
Invariant       | BALANCE_INVARIANT_VIOLATION     | Planned debits != credits (bug)
----------------|---------------------------------|---------------------------------------
Configuration   | DEPENDENCY_CYCLE                | Module dependency graph has a cycle

===============================================================================
RETRY POLICY
===============================================================================

The engine never retries. NotFound and Resolution errors need a caller or
configuration fix; retrying them is pointless. InvariantViolationError means
the generator is wrong and the result must be discarded. Only transient
failures raised by collaborator lookups (database, network) are candidates
for a caller-side retry, and those are not kernel exceptions.
"""


class PostingKernelError(Exception):
    """
    Base exception for all posting kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "POSTING_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(PostingKernelError):
    """Base exception for lookups that did not resolve."""

    code: str = "NOT_FOUND"
    entity: str = "unknown"


class EventNotFoundError(NotFoundError):
    """Business event does not exist for the given tenant."""

    code: str = "EVENT_NOT_FOUND"
    entity: str = "event"

    def __init__(self, tenant_id: str, event_id: str):
        self.tenant_id = tenant_id
        self.event_id = event_id
        super().__init__(f"Event not found: {event_id} (tenant {tenant_id})")


class MappingConfigurationNotFoundError(NotFoundError):
    """No mapping configuration is in effect on the posting date."""

    code: str = "MAPPING_CONFIGURATION_NOT_FOUND"
    entity: str = "mapping_configuration"

    def __init__(
        self,
        tenant_id: str,
        posting_date: str,
        rule_family: str | None = None,
        candidate_count: int = 0,
    ):
        self.tenant_id = tenant_id
        self.posting_date = posting_date
        self.rule_family = rule_family
        self.candidate_count = candidate_count
        msg = (
            f"No mapping configuration in effect on {posting_date} "
            f"for tenant {tenant_id}"
        )
        if rule_family:
            msg += f" (rule family {rule_family})"
        super().__init__(msg)


class AccountNotFoundError(NotFoundError):
    """
    A mapping references an account that no longer resolves.

    This is a data-integrity error: the mapping row exists but points at an
    account the directory cannot find.
    """

    code: str = "ACCOUNT_NOT_FOUND"
    entity: str = "account"

    def __init__(self, tenant_id: str, account_id: str, role: str | None = None):
        self.tenant_id = tenant_id
        self.account_id = account_id
        self.role = role
        msg = f"Account not found: {account_id} (tenant {tenant_id})"
        if role:
            msg += f" referenced as {role}"
        super().__init__(msg)


class RuleFamilyNotFoundError(NotFoundError):
    """No rule family registered under the requested name."""

    code: str = "RULE_FAMILY_NOT_FOUND"
    entity: str = "rule_family"

    def __init__(self, rule_family: str):
        self.rule_family = rule_family
        super().__init__(f"Rule family not registered: {rule_family}")


# Resolution exceptions


class ResolutionError(PostingKernelError):
    """Base exception for inputs the engine refuses to resolve."""

    code: str = "RESOLUTION_ERROR"


class UnsupportedEventTypeError(ResolutionError):
    """Event type is outside the set the engine can plan for."""

    code: str = "UNSUPPORTED_EVENT_TYPE"

    def __init__(self, event_id: str, event_type: str, supported: tuple[str, ...]):
        self.event_id = event_id
        self.event_type = event_type
        self.supported = supported
        super().__init__(
            f"Unsupported event type {event_type!r} for event {event_id}; "
            f"expected one of {', '.join(supported)}"
        )


class AmbiguousMappingConfigurationError(ResolutionError):
    """
    Two mappings share both the latest effective_from and the latest version.

    Overlapping ranges are tolerated (latest start, then latest version wins),
    but rows equal on both keys leave no deterministic winner.
    """

    code: str = "AMBIGUOUS_MAPPING_CONFIGURATION"

    def __init__(
        self,
        tenant_id: str,
        posting_date: str,
        effective_from: str,
        versions: list[str],
    ):
        self.tenant_id = tenant_id
        self.posting_date = posting_date
        self.effective_from = effective_from
        self.versions = versions
        super().__init__(
            f"Mapping configurations {', '.join(versions)} for tenant {tenant_id} "
            f"all start on {effective_from} and cover {posting_date}"
        )


class InvalidPostingDateError(ResolutionError):
    """Posting date is not a calendar date in YYYY-MM-DD form."""

    code: str = "INVALID_POSTING_DATE"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid posting date {value!r}; expected YYYY-MM-DD")


class InvalidEventAmountError(ResolutionError):
    """Event gross amount cannot produce a valid posting."""

    code: str = "INVALID_EVENT_AMOUNT"

    def __init__(self, event_id: str, amount: str, reason: str):
        self.event_id = event_id
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount} for event {event_id}: {reason}")


class InvalidCurrencyError(ResolutionError):
    """Currency code does not have the ISO 4217 three-letter shape."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency!r}")


# Invariant exceptions


class InvariantViolationError(PostingKernelError):
    """
    Base exception for broken kernel invariants.

    These indicate a programming error inside the engine, not a business
    condition. A result that trips one is never returned.
    """

    code: str = "INVARIANT_VIOLATION"
    invariant: str = "unknown"


class BalanceInvariantViolationError(InvariantViolationError):
    """Planned ledger lines do not balance."""

    code: str = "BALANCE_INVARIANT_VIOLATION"
    invariant: str = "balance"

    def __init__(self, debits: str, credits: str, currency: str):
        self.debits = debits
        self.credits = credits
        self.currency = currency
        super().__init__(
            f"Unbalanced posting plan in {currency}: "
            f"debits={debits}, credits={credits}"
        )


# Configuration exceptions


class ConfigurationError(PostingKernelError):
    """Base exception for invalid engine configuration."""

    code: str = "CONFIGURATION_ERROR"


class DependencyCycleError(ConfigurationError):
    """Module dependency graph contains a cycle."""

    code: str = "DEPENDENCY_CYCLE"

    def __init__(self, path: list[str]):
        self.path = path
        super().__init__(
            f"Cycle detected in module dependencies: {' -> '.join(path)}"
        )
