"""
posting_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``, which returns a validated ``EngineConfig``.

Architecture position:
    Configuration -- sits above ``posting_kernel``.  The kernel MUST NEVER
    import from ``posting_config``; ``posting_config.bridges`` translates
    configuration into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- structural validation failed.
    - ``DependencyCycleError`` -- the module dependency graph has a cycle.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``posting_config_trace`` log entry with the config id, version and
    checksum, tying resolutions back to the configuration that governed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from posting_config.loader import load_engine_config
from posting_config.schema import EngineConfig, ModuleDependencyDef, RuleFamilyDef
from posting_config.validator import validate_configuration

_logger = logging.getLogger("posting_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Override path to a configuration file.  Defaults to
            posting_config/sets/default.yaml.

    Returns:
        A validated EngineConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
        DependencyCycleError: If the module dependency graph has a cycle.
    """
    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    config = load_engine_config(config_path)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("posting_config_warning", extra={"detail": warning})

    config.dependency_graph().validate()

    _logger.info(
        "posting_config_trace",
        extra={
            "trace_type": "POSTING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "rule_family_count": len(config.rule_families),
            "module_count": len(config.modules),
        },
    )

    return config


__all__ = [
    "EngineConfig",
    "ModuleDependencyDef",
    "RuleFamilyDef",
    "get_active_config",
]
