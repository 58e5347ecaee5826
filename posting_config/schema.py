"""
EngineConfig schema.

Defines the human-authored, reviewable configuration for the posting engine.
YAML files are parsed into these types by the loader and validated by the
validator before ``get_active_config()`` hands them out.
"""

from __future__ import annotations

from dataclasses import dataclass

from posting_kernel.domain.dependency_graph import DependencyGraph


@dataclass(frozen=True)
class RuleFamilyDef:
    """One event family: snapshot source type plus allocation cost types."""

    name: str
    expense_cost_type: str
    income_cost_type: str
    module: str | None = None
    description: str = ""


@dataclass(frozen=True)
class ModuleDependencyDef:
    """A tenant-enableable module and the modules it needs."""

    key: str
    depends_on: tuple[str, ...] = ()
    is_core: bool = False


@dataclass(frozen=True)
class EngineConfig:
    """
    Root configuration artifact.

    ``checksum`` is computed over the parsed source data, so two files that
    differ only in formatting or key order share a checksum.
    """

    config_id: str
    version: int
    rule_families: tuple[RuleFamilyDef, ...] = ()
    modules: tuple[ModuleDependencyDef, ...] = ()
    checksum: str = ""

    def family(self, name: str) -> RuleFamilyDef | None:
        for family in self.rule_families:
            if family.name == name:
                return family
        return None

    def dependency_graph(self) -> DependencyGraph:
        return DependencyGraph({m.key: m.depends_on for m in self.modules})

    def required_modules(self, family_name: str) -> tuple[str, ...]:
        """The family's module followed by everything it depends on.

        Raises:
            KeyError: If no family with that name is configured.
        """
        family = self.family(family_name)
        if family is None:
            raise KeyError(f"Rule family not configured: {family_name}")
        if family.module is None:
            return ()
        deps = self.dependency_graph().transitive_dependencies(family.module)
        return (family.module, *deps)
