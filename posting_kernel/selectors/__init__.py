"""Selectors for the posting kernel (read side of the collaborators).

Backed by UUIDString columns: tenant, event and account ids must be UUIDs.
Any other lookup key matches nothing and is reported as not found.
"""

from posting_kernel.selectors.account_selector import AccountSelector
from posting_kernel.selectors.event_selector import EventSelector
from posting_kernel.selectors.mapping_selector import MappingConfigurationSelector

__all__ = [
    "AccountSelector",
    "EventSelector",
    "MappingConfigurationSelector",
]
