"""
Configuration Validator (``posting_config.validator``).

Responsibility
--------------
Validates an ``EngineConfig`` before it is handed to the engine.

Invariants enforced
-------------------
* Rule family names are unique.
* Every family declares both cost types.
* A family's module, when given, is a declared module.
* Module dependencies reference declared modules.

The module graph's acyclicity is checked separately by
``DependencyGraph.validate()``, which raises ``DependencyCycleError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from posting_config.schema import EngineConfig


@dataclass
class ConfigValidationResult:
    """Errors block the configuration; warnings do not."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: EngineConfig) -> ConfigValidationResult:
    result = ConfigValidationResult()

    _validate_family_uniqueness(config, result)
    _validate_cost_types(config, result)
    _validate_family_modules(config, result)
    _validate_module_references(config, result)

    return result


def _validate_family_uniqueness(config: EngineConfig, result: ConfigValidationResult) -> None:
    seen: set[str] = set()
    for family in config.rule_families:
        if family.name in seen:
            result.add_error(f"Duplicate rule family: {family.name}")
        seen.add(family.name)


def _validate_cost_types(config: EngineConfig, result: ConfigValidationResult) -> None:
    for family in config.rule_families:
        if not family.expense_cost_type:
            result.add_error(f"Rule family '{family.name}' has no expense cost type")
        if not family.income_cost_type:
            result.add_error(f"Rule family '{family.name}' has no income cost type")


def _validate_family_modules(config: EngineConfig, result: ConfigValidationResult) -> None:
    declared = {m.key for m in config.modules}
    for family in config.rule_families:
        if family.module is None:
            result.add_warning(f"Rule family '{family.name}' is not tied to a module")
        elif family.module not in declared:
            result.add_error(
                f"Rule family '{family.name}' references undeclared module "
                f"'{family.module}'"
            )


def _validate_module_references(config: EngineConfig, result: ConfigValidationResult) -> None:
    declared = {m.key for m in config.modules}
    for module in config.modules:
        for dep in module.depends_on:
            if dep not in declared:
                result.add_error(
                    f"Module '{module.key}' depends on undeclared module '{dep}'"
                )
