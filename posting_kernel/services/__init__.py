"""Services for the posting kernel (resolution side)."""

from posting_kernel.services.collaborators import (
    AccountDirectory,
    EventSource,
    InMemoryAccountDirectory,
    InMemoryEventSource,
    InMemoryMappingConfigurationSource,
    MappingConfigurationSource,
)
from posting_kernel.services.rule_resolution_service import RuleResolutionService

__all__ = [
    "AccountDirectory",
    "EventSource",
    "InMemoryAccountDirectory",
    "InMemoryEventSource",
    "InMemoryMappingConfigurationSource",
    "MappingConfigurationSource",
    "RuleResolutionService",
]
