"""
Config -> Kernel Bridges.

Functions that convert EngineConfig artifacts into kernel inputs. These live
in posting_config (the producer) because the kernel must NEVER import
posting_config.

Usage:
    from posting_config.bridges import build_rule_family_registry

    config = get_active_config()
    families = build_rule_family_registry(config)
    service = RuleResolutionService(events, mappings, accounts, families=families)
"""

from __future__ import annotations

from posting_config.schema import EngineConfig, RuleFamilyDef
from posting_kernel.domain.rule_family import RuleFamily, RuleFamilyRegistry


def build_rule_family(family_def: RuleFamilyDef) -> RuleFamily:
    return RuleFamily(
        name=family_def.name,
        expense_cost_type=family_def.expense_cost_type,
        income_cost_type=family_def.income_cost_type,
        module=family_def.module,
    )


def build_rule_family_registry(config: EngineConfig) -> RuleFamilyRegistry:
    """Build a RuleFamilyRegistry holding exactly the configured families."""
    return RuleFamilyRegistry(build_rule_family(f) for f in config.rule_families)
