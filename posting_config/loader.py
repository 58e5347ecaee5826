"""
Configuration Loader (``posting_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``posting_config.schema`` dataclass instances.  This is build/test tooling;
the runtime entry point is ``posting_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from posting_config.schema import EngineConfig, ModuleDependencyDef, RuleFamilyDef
from posting_kernel.utils.hashing import hash_payload


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_rule_family(data: dict[str, Any]) -> RuleFamilyDef:
    """Parse a RuleFamilyDef from a dict."""
    cost_types = data.get("cost_types", {})
    return RuleFamilyDef(
        name=data["name"],
        expense_cost_type=cost_types.get("expense", ""),
        income_cost_type=cost_types.get("income", ""),
        module=data.get("module"),
        description=data.get("description", ""),
    )


def parse_module(key: str, data: dict[str, Any] | None) -> ModuleDependencyDef:
    """Parse a ModuleDependencyDef from its key and (possibly empty) body."""
    data = data or {}
    return ModuleDependencyDef(
        key=key,
        depends_on=tuple(data.get("depends_on", ())),
        is_core=bool(data.get("is_core", False)),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical (sorted-key) JSON of the parsed source."""
    return hash_payload(data)


def parse_engine_config(data: dict[str, Any]) -> EngineConfig:
    """
    Parse a complete EngineConfig from a loaded YAML document.

    Raises:
        KeyError: if ``config_id`` or a family ``name`` is missing.
    """
    modules = data.get("modules", {}) or {}
    return EngineConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        rule_families=tuple(
            parse_rule_family(f) for f in data.get("rule_families", [])
        ),
        modules=tuple(parse_module(key, body) for key, body in modules.items()),
        checksum=compute_checksum(data),
    )


def load_engine_config(path: Path) -> EngineConfig:
    """Load and parse, without validation."""
    return parse_engine_config(load_yaml_file(path))
